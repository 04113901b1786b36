"""
Errors raised by the public operations.
Protocol-derived errors carry the numeric status and its diagnostic text.
"""

from .ctap import strerr

stages = {
	'type': 'set credential type',
	'rp': 'set RP',
	'user': 'set user',
	'clientdata': 'set challenge',
	'resident-key': 'set resident key option',
	'user-verification': 'set user verification',
	'allow-credential': 'add allowed credential',
	'make_credential': 'create credential',
	'get_assertion': 'get assertion',
}


class WebAuthnError(Exception):
	"""Base class for every failure surfaced to callers."""


class ValidationError(WebAuthnError):
	"""A required request field is missing or empty. No hardware was touched."""


class _StatusError(WebAuthnError):
	def __init__(self, message, status):
		self.status = status
		self.diagnostic = strerr(status) if status is not None else None
		super().__init__(message)


class DeviceDiscoveryError(_StatusError):
	def __init__(self, status):
		super().__init__("Failed to list devices: %s" % strerr(status), status)


class NoDeviceError(_StatusError):
	def __init__(self, status=None):
		message = "No FIDO2 devices found"
		if status is not None:
			message += ": %s" % strerr(status)
		super().__init__(message, status)


class DeviceOpenError(_StatusError):
	def __init__(self, path, status):
		self.path = path
		super().__init__("Failed to open device: %s" % strerr(status), status)


class ProtocolError(_StatusError):
	def __init__(self, stage, status):
		self.stage = stage
		super().__init__("Failed to %s: %s" % (stages.get(stage, stage), strerr(status)), status)


class EmptyResultError(WebAuthnError):
	def __init__(self, message="No assertion returned"):
		super().__init__(message)
