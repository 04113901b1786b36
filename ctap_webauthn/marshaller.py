"""
Copy transaction outputs out of protocol objects into result objects.
Must run before the protocol object is freed; every field is copied into
newly owned bytes.
"""

import logging

from .errors import EmptyResultError
from .models import AssertionResponse, AssertionResult, AttestationResponse, CredentialCreationResult

logger = logging.getLogger(__name__)


def credential_result(cred):
	cred_id = bytes(cred.id)
	response = AttestationResponse(
		authenticator_data=bytes(cred.authdata),
		attestation_object=bytes(cred.attestation),
	)
	logger.debug("credential %s created", cred_id.hex())
	return CredentialCreationResult(id=cred_id, raw_id=cred_id, response=response)


def assertion_result(assertion):
	count = assertion.count()
	if count < 1:
		raise EmptyResultError()
	if count > 1:
		logger.debug("%d assertions returned, using the first", count)
	cred_id = bytes(assertion.id(0))
	user_id = assertion.user_id(0)
	response = AssertionResponse(
		authenticator_data=bytes(assertion.authdata(0)),
		signature=bytes(assertion.sig(0)),
		user_handle=bytes(user_id) if len(user_id) > 0 else None,
	)
	return AssertionResult(id=cred_id, raw_id=cred_id, response=response)
