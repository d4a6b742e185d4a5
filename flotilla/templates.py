"""Template written by ``flotilla init``."""

CONFIG_TEMPLATE = """\
# flotilla configuration
#
# Values can reference the vars section with ${name}.

vars:
  home_region: ca-central-1

# Region used when --region is omitted. Shortcodes such as cac1 work too.
default_region: ${home_region}

regions:
  # Regions used by --all-regions. Falls back to groups.all when empty.
  enabled:
    - cac1
    - use1
  groups:
    production:
      - cac1
      - use1
    all:
      - cac1
      - use1
      - euw1

execution:
  # Concurrent instances per region
  parallel: 4
  # Concurrent regions for exec_multi
  parallel_regions: 5
  # Keep going after a region fails
  continue_on_error: false

command:
  # Seconds between SSM status checks
  poll_interval: 2
  # Seconds to wait for a command before giving up
  max_wait: 300

logging:
  level: info
  file_logging: false
  directory: ~/logs
"""
