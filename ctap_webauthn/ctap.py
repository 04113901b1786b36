"""
CTAP status codes and parameter tables.
Used to turn numeric status codes into diagnostics and to render protocol
requests readably in debug logs.
"""

import json

### CTAP2

CTAP2_OK = 0x00

CTAP2_ERR_UNSUPPORTED_OPTION = 0x2B
CTAP2_ERR_NO_CREDENTIALS = 0x2E
CTAP2_ERR_PIN_INVALID = 0x31
CTAP2_ERR_PIN_BLOCKED = 0x32
CTAP2_ERR_PIN_NOT_SET = 0x35
CTAP2_ERR_PIN_REQUIRED = 0x36	# a.k.a. CTAP2_ERR_PUAT_REQUIRED

status_codes = {
  0x00: 'CTAP1_ERR_SUCCESS',    # Indicates successful response. (CTAP2_OK)
  0x01: 'CTAP1_ERR_INVALID_COMMAND',    # The command is not a valid CTAP command.
  0x02: 'CTAP1_ERR_INVALID_PARAMETER',  # The command included an invalid parameter.
  0x03: 'CTAP1_ERR_INVALID_LENGTH',     # Invalid message or item length.
  0x04: 'CTAP1_ERR_INVALID_SEQ',        # Invalid message sequencing.
  0x05: 'CTAP1_ERR_TIMEOUT',    # Message timed out.
  0x06: 'CTAP1_ERR_CHANNEL_BUSY',       # Channel busy.
  0x0A: 'CTAP1_ERR_LOCK_REQUIRED',      # Command requires channel lock.
  0x0B: 'CTAP1_ERR_INVALID_CHANNEL',    # Command not allowed on this cid.
  0x11: 'CTAP2_ERR_CBOR_UNEXPECTED_TYPE',       # Invalid/unexpected CBOR error.
  0x12: 'CTAP2_ERR_INVALID_CBOR',       # Error when parsing CBOR.
  0x14: 'CTAP2_ERR_MISSING_PARAMETER',  # Missing non-optional parameter.
  0x15: 'CTAP2_ERR_LIMIT_EXCEEDED',     # Limit for number of items exceeded.
  0x17: 'CTAP2_ERR_FP_DATABASE_FULL',   # Fingerprint data base is full.
  0x18: 'CTAP2_ERR_LARGE_BLOB_STORAGE_FULL',    # Large blob storage is full.
  0x19: 'CTAP2_ERR_CREDENTIAL_EXCLUDED',        # Valid credential found in the exclude list.
  0x21: 'CTAP2_ERR_PROCESSING', # Processing (Lengthy operation is in progress).
  0x22: 'CTAP2_ERR_INVALID_CREDENTIAL', # Credential not valid for the authenticator.
  0x23: 'CTAP2_ERR_USER_ACTION_PENDING',        # Authentication is waiting for user interaction.
  0x24: 'CTAP2_ERR_OPERATION_PENDING',  # Processing, lengthy operation is in progress.
  0x25: 'CTAP2_ERR_NO_OPERATIONS',      # No request is pending.
  0x26: 'CTAP2_ERR_UNSUPPORTED_ALGORITHM',      # Authenticator does not support requested algorithm.
  0x27: 'CTAP2_ERR_OPERATION_DENIED',   # Not authorized for requested operation.
  0x28: 'CTAP2_ERR_KEY_STORE_FULL',     # Internal key storage is full.
  0x2B: 'CTAP2_ERR_UNSUPPORTED_OPTION', # Unsupported option.
  0x2C: 'CTAP2_ERR_INVALID_OPTION',     # Not a valid option for current operation.
  0x2D: 'CTAP2_ERR_KEEPALIVE_CANCEL',   # Pending keep alive was cancelled.
  0x2E: 'CTAP2_ERR_NO_CREDENTIALS',     # No valid credentials provided.
  0x2F: 'CTAP2_ERR_USER_ACTION_TIMEOUT',        # A user action timeout occurred.
  0x30: 'CTAP2_ERR_NOT_ALLOWED',        # Continuation command not allowed.
  0x31: 'CTAP2_ERR_PIN_INVALID',        # PIN Invalid.
  0x32: 'CTAP2_ERR_PIN_BLOCKED',        # PIN Blocked.
  0x33: 'CTAP2_ERR_PIN_AUTH_INVALID',   # pinUvAuthParam verification failed.
  0x34: 'CTAP2_ERR_PIN_AUTH_BLOCKED',   # pinUvAuthToken blocked. Requires power cycle to reset.
  0x35: 'CTAP2_ERR_PIN_NOT_SET',        # No PIN has been set.
  0x36: 'CTAP2_ERR_PUAT_REQUIRED',      # A pinUvAuthToken is required for the selected operation.
  0x37: 'CTAP2_ERR_PIN_POLICY_VIOLATION',       # PIN policy violation.
  0x39: 'CTAP2_ERR_REQUEST_TOO_LARGE',  # Authenticator cannot handle this request due to memory constraints.
  0x3A: 'CTAP2_ERR_ACTION_TIMEOUT',     # The current operation has timed out.
  0x3B: 'CTAP2_ERR_UP_REQUIRED',        # User presence is required for the requested operation.
  0x3C: 'CTAP2_ERR_UV_BLOCKED', # built-in user verification is disabled.
  0x3D: 'CTAP2_ERR_INTEGRITY_FAILURE',  # A checksum did not match.
  0x3E: 'CTAP2_ERR_INVALID_SUBCOMMAND', # The requested subcommand is either invalid or not implemented.
  0x3F: 'CTAP2_ERR_UV_INVALID', # built-in user verification unsuccessful.
  0x40: 'CTAP2_ERR_UNAUTHORIZED_PERMISSION',    # The permissions parameter contains an unauthorized permission.
  0x7F: 'CTAP1_ERR_OTHER',      # Other unspecified error.
}

### binding level errors (never sent by an authenticator)

FIDO_OK = CTAP2_OK
FIDO_ERR_TX = -1
FIDO_ERR_RX = -2
FIDO_ERR_INVALID_ARGUMENT = -7
FIDO_ERR_INTERNAL = -9
FIDO_ERR_NOTFOUND = -10
FIDO_ERR_UNSUPPORTED = -12

fido_errors = {
  -1: 'FIDO_ERR_TX',    # Failed to send to the device.
  -2: 'FIDO_ERR_RX',    # Failed to receive from the device.
  -7: 'FIDO_ERR_INVALID_ARGUMENT',      # Rejected by a setter before reaching the device.
  -9: 'FIDO_ERR_INTERNAL',      # Unexpected failure inside the binding.
  -10: 'FIDO_ERR_NOTFOUND',     # No device at the given path.
  -12: 'FIDO_ERR_UNSUPPORTED',  # Device does not speak CTAP2.
}

def strerr(status):
	if status in fido_errors:
		return fido_errors[status]
	if status in status_codes:
		return status_codes[status]
	match status:
		case s if 0xE0 <= s <= 0xEF:
			return 'CTAP2_ERR_EXTENSION (0x%02x)' % s
		case s if 0xF0 <= s <= 0xFF:
			return 'CTAP2_ERR_VENDOR (0x%02x)' % s
		case s if s < 0:
			return 'unknown error (%d)' % s
		case _:
			return 'unknown error (0x%02x)' % status

### request parameters
# https://fidoalliance.org/specs/fido-v2.2-ps-20250228/fido-client-to-authenticator-protocol-v2.2-ps-20250228.html

makeCredentialKeys = {
  # required
  0x01: 'clientDataHash', # Hash of the ClientData contextual binding specified by host
  0x02: 'rp', # Relying Party the new credential will be associated with
  0x03: 'user', # User account the new credential will be associated with at the RP
  0x04: 'pubKeyCredParams', # List of supported algorithms for credential generation
  # optional
  0x05: 'excludeList',
  0x06: 'extensions',
  0x07: 'options',
  0x08: 'pinUvAuthParam', # Result of calling authenticate(pinUvAuthToken, clientDataHash)
  0x09: 'pinUvAuthProtocol',
}

getAssertionKeys = {
  # required
  0x01: 'rpId',
  0x02: 'clientDataHash',
  # optional
  0x03: 'allowList',
  0x04: 'extensions',
  0x05: 'options',
  0x06: 'pinUvAuthParam',
  0x07: 'pinUvAuthProtocol',
}

class HexEncoder(json.JSONEncoder):
	def default(self, obj):
		if isinstance(obj, (bytes, bytearray, memoryview)):
			return bytes(obj).hex()
		# Let the base class default method raise the TypeError
		return json.JSONEncoder.default(self, obj)

def map_hex(d):
	for k, v in d.copy().items():
		match v:
			case bytes() | bytearray():
				d[k] = '0x' + bytes(v).hex()
			case dict():
				d[k] = map_hex(dict(v))
			case list():
				d[k] = [map_hex(dict(i)) if isinstance(i, dict) else i for i in v]
			case _:
				d[k] = v
	return d

def describe(params, keys):
	"""Name the integer keys of a CTAP parameter map, dropping absent ones."""
	named = {keys.get(k, k): v for k, v in params.items() if v is not None}
	return map_hex(named)
