# Upsync Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "store": {
        "access_key": None,
        "secret_key": None,
        "region": "us-east-1",
        "endpoint_url": None,
    },
    "sync": {
        "glob": "**/*",
        "public": False,
        "no_prompt": False,
        "backups_retain": False,
        "days_retain": 30,
        "weeks_retain": 5,
        "months_retain": 3,
        "dry_run": False,
        "workers": 1,
    },
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": None,
    },
}


def default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# Upsync Configuration
#
# store:   credentials may be left empty; KEY/SECRET or the usual
#          AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY variables are used instead.
# sync:    defaults for 'upsync sync', every option can be overridden
#          on the command line.
#
# Retention (backups_retain: true) keeps, for each of the last N days,
# weeks and months, the earliest object modified on or after the start
# of that period, and deletes every other object matching the glob.

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
