"""
Constants
Centralised storage for the analyzer source tag, command templates and option labels.
"""
SOURCE_TAG = "infer"

# Both placeholders are filled with str.replace; user templates may hold other braces
ANALYZER_PLACEHOLDER = "{analyzer}"
BUILD_STEP_PLACEHOLDER = "{0}"
DEFAULT_COMMAND_TEMPLATE = ANALYZER_PLACEHOLDER + " run --reactive -- " + BUILD_STEP_PLACEHOLDER
BARE_RUN_TEMPLATE = ANALYZER_PLACEHOLDER + " run"

# Container layout
CONTAINER_PROJECT_DIR = "/project"
CONTAINER_SHELL = "/bin/bash"

# Configuration option labels shown by the host
OPTION_USE_DEFAULT_COMMAND = "run default command"
OPTION_RUN_COMMAND = "run command: "
