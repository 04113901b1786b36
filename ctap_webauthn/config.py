"""
Settings read from the environment (CTAP_WEBAUTHN_* and FIDO2_PIN).
"""

import os
from dataclasses import dataclass, field


def _flag(value):
	return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
	rp_id: str = "localhost"
	rp_name: str = "WebAuthn Example"
	user_verification: str = "preferred"
	device: str | None = None
	pin: str | None = field(default=None, repr=False)
	debug: bool = False

	@classmethod
	def from_env(cls, environ=None):
		env = os.environ if environ is None else environ
		return cls(
			rp_id=env.get("CTAP_WEBAUTHN_RP_ID") or cls.rp_id,
			rp_name=env.get("CTAP_WEBAUTHN_RP_NAME") or cls.rp_name,
			user_verification=env.get("CTAP_WEBAUTHN_USER_VERIFICATION") or cls.user_verification,
			device=env.get("CTAP_WEBAUTHN_DEVICE") or None,
			pin=env.get("FIDO2_PIN") or None,
			debug=_flag(env.get("CTAP_WEBAUTHN_DEBUG")),
		)
