"""
WebAuthn-shaped credential creation and assertion against local FIDO2/CTAP2
authenticators.
"""

from .client import get_assertion, list_devices, make_credential
from .errors import (
	DeviceDiscoveryError,
	DeviceOpenError,
	EmptyResultError,
	NoDeviceError,
	ProtocolError,
	ValidationError,
	WebAuthnError,
)
from .models import (
	AssertionRequest,
	AssertionResult,
	AuthenticatorDevice,
	CredentialCreationRequest,
	CredentialCreationResult,
	UserVerification,
)
from .webauthn import WebAuthn, credentials

__version__ = "0.1.0"

__all__ = [
	"AssertionRequest",
	"AssertionResult",
	"AuthenticatorDevice",
	"CredentialCreationRequest",
	"CredentialCreationResult",
	"DeviceDiscoveryError",
	"DeviceOpenError",
	"EmptyResultError",
	"NoDeviceError",
	"ProtocolError",
	"UserVerification",
	"ValidationError",
	"WebAuthn",
	"WebAuthnError",
	"credentials",
	"get_assertion",
	"list_devices",
	"make_credential",
]
