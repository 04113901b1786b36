"""
navigator.credentials style facade.

Takes WebAuthn option dictionaries ({"publicKey": {...}}), builds and hashes
the client data the way a browser would, and runs the request through the
client operations. When asked to, prompts for a PIN once if the
authenticator wants one and retries.
"""

import json
import logging
from collections.abc import Mapping
from getpass import getpass

from fido2.utils import sha256, websafe_encode

from . import client
from .config import Settings
from .ctap import CTAP2_ERR_PIN_INVALID, CTAP2_ERR_PIN_REQUIRED
from .errors import ProtocolError, ValidationError
from .models import AssertionRequest, CredentialCreationRequest

logger = logging.getLogger(__name__)

PIN_RETRY_STATUSES = (CTAP2_ERR_PIN_REQUIRED, CTAP2_ERR_PIN_INVALID)


def prompt_for_pin():
	return getpass("Please enter your FIDO2 device PIN: ")


def to_bytes(value, name):
	if isinstance(value, (bytes, bytearray, memoryview)):
		return bytes(value)
	if isinstance(value, str):
		return value.encode()
	raise ValidationError("%s must be bytes or a string" % name)


def client_data(kind, challenge, rp_id):
	"""Compact clientDataJSON for the given ceremony type."""
	return json.dumps(
		{
			"type": kind,
			"challenge": websafe_encode(challenge),
			"origin": "https://%s" % rp_id,
			"crossOrigin": False,
		},
		separators=(",", ":"),
	).encode()


def _public_key(options):
	if not isinstance(options, Mapping) or not isinstance(options.get("publicKey"), Mapping):
		raise ValidationError("Missing required publicKey options")
	return options["publicKey"]


class WebAuthn:
	def __init__(self, rp_id=None, rp_name=None, user_verification=None, settings=None, prompt=prompt_for_pin):
		settings = settings or Settings.from_env()
		self.rp_id = rp_id or settings.rp_id
		self.rp_name = rp_name or settings.rp_name
		self.user_verification = user_verification or settings.user_verification
		self.device = settings.device
		self.pin = settings.pin
		self.prompt = prompt

	def list_devices(self):
		return client.list_devices()

	def _run(self, operation, request, pin_prompt):
		try:
			return operation(request)
		except ProtocolError as e:
			if e.status not in PIN_RETRY_STATUSES or not pin_prompt:
				raise
			logger.info("authenticator asked for a PIN (%s)", e.diagnostic)
			pin = self.prompt()
			if not pin:
				raise
			request.pin = pin
			return operation(request)

	def create(self, options):
		public_key = _public_key(options)
		rp = public_key.get("rp") or {}
		if not rp.get("id"):
			raise ValidationError("Missing required rp.id parameter")
		user = public_key.get("user") or {}
		if not (user.get("id") and user.get("name") and user.get("displayName")):
			raise ValidationError("Missing required user parameters")
		if not public_key.get("challenge"):
			raise ValidationError("Missing required challenge parameter")

		client_data_json = client_data("webauthn.create", to_bytes(public_key["challenge"], "challenge"), rp["id"])
		selection = public_key.get("authenticatorSelection") or {}
		request = CredentialCreationRequest(
			rp_id=rp["id"],
			rp_name=rp.get("name") or self.rp_name,
			user_id=to_bytes(user["id"], "user.id"),
			user_name=user["name"],
			user_display_name=user["displayName"],
			challenge=sha256(client_data_json),
			device_path=public_key.get("device") or self.device,
			resident_key=bool(selection.get("requireResidentKey")),
			user_verification=selection.get("userVerification") or self.user_verification,
			pin=public_key.get("pin") or self.pin,
		)
		result = self._run(client.make_credential, request, public_key.get("pinPrompt"))
		result.response.client_data_json = client_data_json
		return result

	def get(self, options):
		public_key = _public_key(options)
		if not public_key.get("rpId"):
			raise ValidationError("Missing required rpId parameter")
		if not public_key.get("challenge"):
			raise ValidationError("Missing required challenge parameter")

		client_data_json = client_data("webauthn.get", to_bytes(public_key["challenge"], "challenge"), public_key["rpId"])
		allowed = []
		for cred in public_key.get("allowCredentials") or ():
			if isinstance(cred, Mapping) and cred.get("id"):
				allowed.append(to_bytes(cred["id"], "allowCredentials.id"))
		request = AssertionRequest(
			rp_id=public_key["rpId"],
			challenge=sha256(client_data_json),
			device_path=public_key.get("device") or self.device,
			allow_credentials=allowed,
			user_verification=public_key.get("userVerification") or self.user_verification,
			pin=public_key.get("pin") or self.pin,
		)
		result = self._run(client.get_assertion, request, public_key.get("pinPrompt"))
		result.response.client_data_json = client_data_json
		return result


class CredentialsContainer:
	"""Module level stand-in for navigator.credentials."""

	def create(self, options):
		return WebAuthn().create(options)

	def get(self, options):
		return WebAuthn().get(options)


credentials = CredentialsContainer()
