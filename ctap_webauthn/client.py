"""
Public operations: list devices, create a credential, get an assertion.

Each transaction runs strictly in order: validate, pick a device if none was
given, build the protocol object, open the device, transact, close, copy the
results out, free the protocol object.
"""

import logging

from . import builders, fido
from .directory import list_devices as _list_devices
from .directory import select_default_device
from .marshaller import assertion_result, credential_result
from .session import DeviceSession
from .validation import validate_assertion_request, validate_credential_request

logger = logging.getLogger(__name__)


def list_devices():
	fido.init()
	return _list_devices()


def make_credential(request):
	fido.init()
	validate_credential_request(request)
	path = request.device_path or select_default_device()
	with builders.credential(request) as cred:
		with DeviceSession(path) as session:
			session.make_credential(cred, request.pin)
		return credential_result(cred)


def get_assertion(request):
	fido.init()
	validate_assertion_request(request)
	path = request.device_path or select_default_device()
	with builders.assertion(request) as assertion:
		with DeviceSession(path) as session:
			session.get_assertion(assertion, request.pin)
		return assertion_result(assertion)
