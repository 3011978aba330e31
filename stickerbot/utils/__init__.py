"""
Utilities Package for the Sticker Bot.

Modules:
    - process_utils.py: Runs external commands asynchronously with a hard
      timeout and guaranteed teardown.
    - module_checker.py: Locates external tools and verifies at startup that
      they can be executed.
    - format_utils.py: Helper functions for human-readable log output.
"""
