"""
Request and result types.
Binary fields are bytes, text fields are str. Each result renders to the
WebAuthn response shape with to_dict().
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

PUBLIC_KEY = "public-key"


class UserVerification(Enum):
	"""User verification requirements."""

	REQUIRED = "required"
	PREFERRED = "preferred"
	DISCOURAGED = "discouraged"


def _text(value):
	return value if isinstance(value, str) else ""


def _binary(value):
	if isinstance(value, (bytes, bytearray, memoryview)):
		return bytes(value)
	return b""


def _obj(value):
	return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class AuthenticatorDevice:
	path: str
	manufacturer: str
	product: str

	def to_dict(self):
		return {"path": self.path, "manufacturer": self.manufacturer, "product": self.product}


@dataclass
class CredentialCreationRequest:
	rp_id: str = ""
	rp_name: str = ""
	user_id: bytes = b""
	user_name: str = ""
	user_display_name: str = ""
	challenge: bytes = b""
	device_path: str | None = None
	resident_key: bool = False
	user_verification: UserVerification | str | None = UserVerification.DISCOURAGED
	pin: str | None = field(default=None, repr=False)

	@classmethod
	def from_options(cls, options):
		"""Unpack a flat options object ({"rp": {...}, "user": {...}, "challenge": ...})."""
		rp = _obj(options.get("rp"))
		user = _obj(options.get("user"))
		return cls(
			rp_id=_text(rp.get("id")),
			rp_name=_text(rp.get("name")),
			user_id=_binary(user.get("id")),
			user_name=_text(user.get("name")),
			user_display_name=_text(user.get("displayName")),
			challenge=_binary(options.get("challenge")),
			device_path=_text(options.get("device")) or None,
			resident_key=options.get("resident") is True,
			user_verification=_text(options.get("userVerification")) or UserVerification.DISCOURAGED,
			pin=_text(options.get("pin")) or None,
		)


@dataclass
class AssertionRequest:
	rp_id: str = ""
	challenge: bytes = b""
	device_path: str | None = None
	allow_credentials: list[bytes] = field(default_factory=list)
	user_verification: UserVerification | str | None = UserVerification.DISCOURAGED
	pin: str | None = field(default=None, repr=False)

	@classmethod
	def from_options(cls, options):
		"""Unpack a flat options object ({"rpId": ..., "challenge": ..., "allowCredentials": [...]})."""
		allowed = []
		creds = options.get("allowCredentials")
		if isinstance(creds, (list, tuple)):
			for cred in creds:
				# non-object entries are skipped
				if not isinstance(cred, Mapping):
					continue
				cred_id = _binary(cred.get("id"))
				if cred_id:
					allowed.append(cred_id)
		return cls(
			rp_id=_text(options.get("rpId")),
			challenge=_binary(options.get("challenge")),
			device_path=_text(options.get("device")) or None,
			allow_credentials=allowed,
			user_verification=_text(options.get("userVerification")) or UserVerification.DISCOURAGED,
			pin=_text(options.get("pin")) or None,
		)


@dataclass
class AttestationResponse:
	authenticator_data: bytes
	attestation_object: bytes
	client_data_json: bytes | None = None

	def to_dict(self):
		d = {"authenticatorData": self.authenticator_data, "attestationObject": self.attestation_object}
		if self.client_data_json is not None:
			d["clientDataJSON"] = self.client_data_json
		return d


@dataclass
class CredentialCreationResult:
	id: bytes
	raw_id: bytes
	response: AttestationResponse
	type: str = PUBLIC_KEY

	def to_dict(self):
		return {"id": self.id, "rawId": self.raw_id, "type": self.type, "response": self.response.to_dict()}


@dataclass
class AssertionResponse:
	authenticator_data: bytes
	signature: bytes
	# None when the authenticator holds no user handle for the credential
	user_handle: bytes | None
	client_data_json: bytes | None = None

	def to_dict(self):
		d = {
			"authenticatorData": self.authenticator_data,
			"signature": self.signature,
			"userHandle": self.user_handle,
		}
		if self.client_data_json is not None:
			d["clientDataJSON"] = self.client_data_json
		return d


@dataclass
class AssertionResult:
	id: bytes
	raw_id: bytes
	response: AssertionResponse
	type: str = PUBLIC_KEY

	def to_dict(self):
		return {"id": self.id, "rawId": self.raw_id, "type": self.type, "response": self.response.to_dict()}
