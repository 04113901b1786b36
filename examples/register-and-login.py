"""
Creates a credential on the first authenticator found, then logs in with it.
"""

import secrets

from ctap_webauthn import credentials

print("Creating a new credential...")
credential = credentials.create({
	"publicKey": {
		"rp": {"id": "example.com", "name": "Example WebAuthn App"},
		"user": {
			"id": secrets.token_bytes(16),
			"name": "john.doe@example.com",
			"displayName": "John Doe",
		},
		"challenge": secrets.token_bytes(32),
		"pubKeyCredParams": [{"type": "public-key", "alg": -7}],	# ES256
		"authenticatorSelection": {
			"userVerification": "preferred",
			"requireResidentKey": False,
		},
		"pinPrompt": True,
	}
})
print("Credential created!")
print("Credential ID: %s" % credential.id.hex())

print("\nAuthenticating with the credential...")
assertion = credentials.get({
	"publicKey": {
		"rpId": "example.com",
		"challenge": secrets.token_bytes(32),
		"allowCredentials": [{"type": "public-key", "id": credential.raw_id}],
		"userVerification": "preferred",
		"pinPrompt": True,
	}
})
print("Authentication successful!")
print("Authenticator data length: %i" % len(assertion.response.authenticator_data))
print("Signature length: %i" % len(assertion.response.signature))
