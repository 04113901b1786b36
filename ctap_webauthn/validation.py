"""
Request checks. These run before any protocol object is built and before any
device is opened, since opening a device can prompt the user for a touch.
"""

import logging

from .errors import ValidationError

logger = logging.getLogger(__name__)

BINARY = (bytes, bytearray, memoryview)


def _require(request, names, binary=()):
	missing = [name for name in names if not getattr(request, name, None)]
	if missing:
		logger.debug("rejecting request, missing %s", ", ".join(missing))
		raise ValidationError("Missing required parameters: %s" % ", ".join(missing))
	wrong = [name for name in binary if not isinstance(getattr(request, name), BINARY)]
	if wrong:
		logger.debug("rejecting request, not bytes: %s", ", ".join(wrong))
		raise ValidationError("Parameters must be bytes: %s" % ", ".join(wrong))


def validate_credential_request(request):
	_require(request, ("rp_id", "user_id", "challenge"), binary=("user_id", "challenge"))


def validate_assertion_request(request):
	_require(request, ("rp_id", "challenge"), binary=("challenge",))
	for cred_id in request.allow_credentials or ():
		if not isinstance(cred_id, BINARY):
			raise ValidationError("Parameters must be bytes: allow_credentials")
