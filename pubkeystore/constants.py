# pubkeystore/constants.py

PEM_HEADER = "-----BEGIN PUBLIC KEY-----"
PEM_FOOTER = "-----END PUBLIC KEY-----"
PEM_LINE_WIDTH = 64

# Archives written by older tooling carry no algorithm metadata; those keys are RSA.
DEFAULT_ALGORITHM = "RSA"

# Extra-field header id used for algorithm identifiers too long to store raw.
ALGORITHM_EXTRA_TAG = 0x6B70

ZIP_NAME_MAX_BYTES = 0xFFFF
