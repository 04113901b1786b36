"""
Request builders: map a validated request onto a protocol credential or
assertion object.

Both builders are context managers. The object is freed when the with-block
exits, and straight away if a setter rejects a value; a rejected setter
surfaces as ProtocolError tagged with the stage that failed.
"""

import logging
from contextlib import contextmanager

from . import fido
from .ctap import FIDO_OK
from .errors import ProtocolError

logger = logging.getLogger(__name__)


def uv_option(user_verification):
	# "preferred" leaves the decision to the authenticator; anything else disables UV
	match getattr(user_verification, "value", user_verification):
		case "required":
			return fido.FIDO_OPT_TRUE
		case "preferred":
			return fido.FIDO_OPT_OMIT
		case _:
			return fido.FIDO_OPT_FALSE


def rk_option(resident_key):
	return fido.FIDO_OPT_TRUE if resident_key else fido.FIDO_OPT_FALSE


def _check(status, stage):
	if status != FIDO_OK:
		logger.debug("setter for %s rejected the request", stage)
		raise ProtocolError(stage, status)


@contextmanager
def credential(request):
	cred = fido.Cred()
	try:
		_check(cred.set_type(fido.COSE_ES256), "type")
		_check(cred.set_rp(request.rp_id, request.rp_name), "rp")
		_check(cred.set_user(request.user_id, request.user_name, request.user_display_name), "user")
		_check(cred.set_clientdata_hash(request.challenge), "clientdata")
		_check(cred.set_rk(rk_option(request.resident_key)), "resident-key")
		_check(cred.set_uv(uv_option(request.user_verification)), "user-verification")
		logger.debug("built credential request for rp %s", request.rp_id)
		yield cred
	finally:
		cred.free()


@contextmanager
def assertion(request):
	assert_ = fido.Assert()
	try:
		_check(assert_.set_rp(request.rp_id), "rp")
		_check(assert_.set_clientdata_hash(request.challenge), "clientdata")
		for cred_id in request.allow_credentials or ():
			_check(assert_.allow_cred(cred_id), "allow-credential")
		_check(assert_.set_uv(uv_option(request.user_verification)), "user-verification")
		logger.debug("built assertion request for rp %s (%d allowed credential(s))", request.rp_id, len(assert_.allow_list))
		yield assert_
	finally:
		assert_.free()
