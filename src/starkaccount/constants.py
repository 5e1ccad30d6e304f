"""Shared constants for starkaccount."""

# Field / curve
FIELD_PRIME = 2**251 + 17 * 2**192 + 1
EC_ORDER = 0x800000000000010FFFFFFFFFFFFFFFFB781126DCAE7B2321E66A241ADC64D2F
MAX_SIGNABLE_HASH = 2**251  # hashes must be strictly below this to be signed
MASK_250 = 2**250 - 1
MAX_SHORT_STRING_LENGTH = 31

# Selectors that bypass keccak
DEFAULT_ENTRY_POINT_NAME = "__default__"
DEFAULT_L1_ENTRY_POINT_NAME = "__l1_default__"
DEFAULT_ENTRY_POINT_SELECTOR = 0

# Account contract entrypoints
EXECUTE_ENTRYPOINT = "execute"
GET_NONCE_ENTRYPOINT = "get_nonce"
IS_VALID_SIGNATURE_ENTRYPOINT = "is_valid_signature"

# Only one inner call per execute() until the account contract supports multicall
MAX_BATCH_SIZE = 1

# Typed data
STARKNET_MESSAGE_PREFIX = "StarkNet Message"
DOMAIN_TYPE_NAME = "StarkNetDomain"
ARRAY_SUFFIX = "*"

# Gateway
INVOKE_FUNCTION_TX_TYPE = "INVOKE_FUNCTION"
DEFAULT_BLOCK_ID = "pending"
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds

ALPHA_GOERLI_URL = "https://alpha4.starknet.io"
ALPHA_MAINNET_URL = "https://alpha-mainnet.starknet.io"
DEFAULT_NETWORK = "alpha-goerli"


class TransactionStatus:
    """Gateway transaction status values."""

    NOT_RECEIVED = "NOT_RECEIVED"
    RECEIVED = "RECEIVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    ACCEPTED_ON_L2 = "ACCEPTED_ON_L2"
    ACCEPTED_ON_L1 = "ACCEPTED_ON_L1"
