"""
ctap-webauthn command line.

Usage:
    ctap-webauthn list
    ctap-webauthn register [--rp-id ID] [--user NAME] [--resident] [--uv MODE] ...
    ctap-webauthn authenticate [--rp-id ID] [--credential-id HEX ...] [--uv MODE] ...
"""

import argparse
import json
import logging
import secrets
import sys

from dotenv import load_dotenv

from . import fido
from .config import Settings
from .ctap import HexEncoder
from .errors import WebAuthnError
from .webauthn import WebAuthn

UV_CHOICES = ("required", "preferred", "discouraged")


def dump(result):
	print(json.dumps(result.to_dict(), indent=4, cls=HexEncoder))


def cmd_list(args, webauthn):
	devices = webauthn.list_devices()
	if not devices:
		print("No FIDO2 devices found")
	for device in devices:
		print("%s\t%s %s" % (device.path, device.manufacturer, device.product))


def cmd_register(args, webauthn):
	result = webauthn.create({
		"publicKey": {
			"rp": {"id": args.rp_id or webauthn.rp_id, "name": args.rp_name or webauthn.rp_name},
			"user": {
				"id": secrets.token_bytes(16),
				"name": args.user,
				"displayName": args.display_name or args.user,
			},
			"challenge": secrets.token_bytes(32),
			"authenticatorSelection": {
				"requireResidentKey": args.resident,
				"userVerification": args.uv,
			},
			"device": args.device,
			"pin": args.pin,
			"pinPrompt": args.pin_prompt,
		}
	})
	dump(result)


def cmd_authenticate(args, webauthn):
	result = webauthn.get({
		"publicKey": {
			"rpId": args.rp_id or webauthn.rp_id,
			"challenge": secrets.token_bytes(32),
			"allowCredentials": [{"type": "public-key", "id": i} for i in args.credential_id],
			"userVerification": args.uv,
			"device": args.device,
			"pin": args.pin,
			"pinPrompt": args.pin_prompt,
		}
	})
	dump(result)


def _transaction_args(p):
	p.add_argument("--rp-id", help="relying party id (default: CTAP_WEBAUTHN_RP_ID or localhost)")
	p.add_argument("--uv", choices=UV_CHOICES, help="user verification requirement")
	p.add_argument("--device", help="device path (default: first device found)")
	p.add_argument("--pin", help="authenticator PIN (default: FIDO2_PIN)")
	p.add_argument("--pin-prompt", action="store_true", help="ask for the PIN if the authenticator requires one")


def build_parser():
	parser = argparse.ArgumentParser(prog="ctap-webauthn", description="WebAuthn requests against a local FIDO2 authenticator")
	parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
	sub = parser.add_subparsers(dest="command", required=True)

	p = sub.add_parser("list", help="list attached authenticators")
	p.set_defaults(func=cmd_list)

	p = sub.add_parser("register", help="create a credential")
	_transaction_args(p)
	p.add_argument("--rp-name", help="relying party name")
	p.add_argument("--user", default="john.doe@example.com", help="user name")
	p.add_argument("--display-name", help="user display name (default: user name)")
	p.add_argument("--resident", action="store_true", help="create a discoverable credential")
	p.set_defaults(func=cmd_register)

	p = sub.add_parser("authenticate", help="get an assertion")
	_transaction_args(p)
	p.add_argument("--credential-id", type=bytes.fromhex, action="append", default=[], help="allowed credential id, hex (repeatable)")
	p.set_defaults(func=cmd_authenticate)
	return parser


def main(argv=None):
	load_dotenv()
	args = build_parser().parse_args(argv)
	settings = Settings.from_env()
	debug = args.verbose or settings.debug
	logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
	fido.init(fido.FIDO_DEBUG if debug else 0)

	try:
		args.func(args, WebAuthn(settings=settings))
	except WebAuthnError as e:
		print("Error: %s" % e, file=sys.stderr)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
