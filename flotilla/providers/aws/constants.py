"""AWS-specific constants for EC2 and SSM operations.

Region shortcodes follow the ``<geo><direction><number>`` convention
(``cac1`` for ``ca-central-1``) so operators can type short names on the
command line.
"""

DEFAULT_REGION = "ca-central-1"

REGION_SHORTCODES = {
    "cac1": "ca-central-1",
    "caw1": "ca-west-1",
    "use1": "us-east-1",
    "use2": "us-east-2",
    "usw1": "us-west-1",
    "usw2": "us-west-2",
    "euw1": "eu-west-1",
    "euw2": "eu-west-2",
    "euw3": "eu-west-3",
    "euc1": "eu-central-1",
    "euc2": "eu-central-2",
    "eun1": "eu-north-1",
    "eus1": "eu-south-1",
    "eus2": "eu-south-2",
    "aps1": "ap-south-1",
    "aps2": "ap-south-2",
    "apse1": "ap-southeast-1",
    "apse2": "ap-southeast-2",
    "apse3": "ap-southeast-3",
    "apse4": "ap-southeast-4",
    "apne1": "ap-northeast-1",
    "apne2": "ap-northeast-2",
    "apne3": "ap-northeast-3",
    "sae1": "sa-east-1",
    "afs1": "af-south-1",
    "mes1": "me-south-1",
    "mec1": "me-central-1",
}
"""Shortcode to AWS region name."""

REGION_DESCRIPTIONS = {
    "cac1": "Canada Central (Montreal)",
    "caw1": "Canada West (Calgary)",
    "use1": "US East (N. Virginia)",
    "use2": "US East (Ohio)",
    "usw1": "US West (N. California)",
    "usw2": "US West (Oregon)",
    "euw1": "EU West (Ireland)",
    "euw2": "EU West (London)",
    "euw3": "EU West (Paris)",
    "euc1": "EU Central (Frankfurt)",
    "euc2": "EU Central (Zurich)",
    "eun1": "EU North (Stockholm)",
    "eus1": "EU South (Milan)",
    "eus2": "EU South (Spain)",
    "aps1": "Asia Pacific South (Mumbai)",
    "aps2": "Asia Pacific South (Hyderabad)",
    "apse1": "Asia Pacific Southeast (Singapore)",
    "apse2": "Asia Pacific Southeast (Sydney)",
    "apse3": "Asia Pacific Southeast (Jakarta)",
    "apse4": "Asia Pacific Southeast (Melbourne)",
    "apne1": "Asia Pacific Northeast (Tokyo)",
    "apne2": "Asia Pacific Northeast (Seoul)",
    "apne3": "Asia Pacific Northeast (Osaka)",
    "sae1": "South America East (São Paulo)",
    "afs1": "Africa South (Cape Town)",
    "mes1": "Middle East South (Bahrain)",
    "mec1": "Middle East Central (UAE)",
}

UNKNOWN_REGION_DESCRIPTION = "Unknown Region"

VALID_REGION_PREFIXES = frozenset(
    ("us", "us-gov", "eu", "ap", "ca", "sa", "af", "me", "il", "mx", "cn")
)
"""Geography prefixes accepted in full region names."""

SSM_SHELL_DOCUMENT = "AWS-RunShellScript"

SSM_PENDING_STATUSES = frozenset(("Pending", "InProgress", "Delayed"))
"""Command invocation statuses that keep the runner polling."""

NAME_TAG = "Name"

SSM_SUCCESS_STATUS = "Success"
