"""
Shared fixtures.

`authenticator` replaces the device layer of ctap_webauthn.fido with a
simulated authenticator and counts every protocol object and device handle
that is still allocated. `hid` fakes the python-fido2 layer underneath the
binding itself.
"""

import copy
from types import SimpleNamespace

import pytest
from fido2.ctap import CtapError
from fido2.ctap2.pin import ClientPin

from ctap_webauthn import fido
from ctap_webauthn.ctap import FIDO_ERR_INVALID_ARGUMENT, FIDO_OK

SETTERS = (
	"set_type",
	"set_rp",
	"set_user",
	"set_clientdata_hash",
	"set_rk",
	"set_uv",
	"allow_cred",
)


class SimulatedAuthenticator:
	def __init__(self):
		self.devices = [
			fido.DevInfo("/dev/hidraw3", "Yubico", "YubiKey 5 NFC"),
			fido.DevInfo("/dev/hidraw1", "Feitian", "ePass FIDO"),
		]
		self.manifest_status = FIDO_OK
		self.open_status = FIDO_OK
		self.transact_status = FIDO_OK
		self.cred_output = (b"\x07\x07", b"\xaa", b"\xbb\xcc")
		self.assertions = [(b"\x01\x02", b"\xa1\xa2", b"\x51\x52", b"\x09")]
		self.fail_setter = None
		self.fail_status = FIDO_ERR_INVALID_ARGUMENT
		self.fail_after = 0
		self.manifest_calls = 0
		self.opened = []
		self.setter_calls = []
		self.transactions = []
		self.objects = []
		self.outstanding = 0

	def manifest(self, ilen):
		self.manifest_calls += 1
		if self.manifest_status != FIDO_OK:
			return self.manifest_status, []
		return FIDO_OK, list(self.devices[:ilen])

	def setter(self, name, fn):
		sim = self

		def wrapped(obj, *args):
			sim.setter_calls.append((name, args))
			if name == sim.fail_setter:
				if sim.fail_after == 0:
					return sim.fail_status
				sim.fail_after -= 1
			return fn(obj, *args)

		return wrapped

	def tracked(self, cls):
		sim = self

		class Tracked(cls):
			def __init__(self):
				super().__init__()
				sim.outstanding += 1
				sim.objects.append(self)

			def free(self):
				if not self.freed:
					sim.outstanding -= 1
				super().free()

		for name in SETTERS:
			if hasattr(cls, name):
				setattr(Tracked, name, self.setter(name, getattr(cls, name)))
		return Tracked

	def device_class(self):
		sim = self

		class SimulatedDev:
			def __init__(self):
				sim.outstanding += 1
				self.path = None
				self.closed = False

			def open(self, path):
				sim.opened.append(path)
				if sim.open_status != FIDO_OK:
					return sim.open_status
				self.path = path
				return FIDO_OK

			def close(self):
				if not self.closed:
					sim.outstanding -= 1
					self.closed = True

			def make_cred(self, cred, pin=None):
				sim.transactions.append(("make_cred", self.path, pin, cred))
				if sim.transact_status != FIDO_OK:
					return sim.transact_status
				cred.set_output(*sim.cred_output)
				return FIDO_OK

			def get_assert(self, assertion, pin=None):
				sim.transactions.append(("get_assert", self.path, pin, copy.copy(assertion)))
				if sim.transact_status != FIDO_OK:
					return sim.transact_status
				for stmt in sim.assertions:
					assertion.add_output(*stmt)
				return FIDO_OK

		return SimulatedDev


@pytest.fixture
def authenticator(monkeypatch):
	sim = SimulatedAuthenticator()
	monkeypatch.setattr(fido, "dev_info_manifest", sim.manifest)
	monkeypatch.setattr(fido, "Cred", sim.tracked(fido.Cred))
	monkeypatch.setattr(fido, "Assert", sim.tracked(fido.Assert))
	monkeypatch.setattr(fido, "Dev", sim.device_class())
	return sim


### python-fido2 fakes

class FakeAuthData(bytes):
	credential_data = None


def auth_data(raw, credential_id=None):
	data = FakeAuthData(raw)
	if credential_id is not None:
		data.credential_data = SimpleNamespace(credential_id=credential_id)
	return data


class FakeHidDevice:
	def __init__(self, path):
		self.path = path
		self.closed = False

	def close(self):
		self.closed = True


class FakeCtap2:
	def __init__(self, hid, device):
		self.hid = hid
		self.device = device
		if hid.ctap2_error is not None:
			raise hid.ctap2_error
		hid.ctaps.append(self)

	def make_credential(self, client_data_hash, rp, user, key_params, exclude_list=None,
			extensions=None, options=None, pin_uv_param=None, pin_uv_protocol=None):
		self.hid.calls.append(("make_credential", dict(
			client_data_hash=client_data_hash, rp=rp, user=user, key_params=key_params,
			options=options, pin_uv_param=pin_uv_param, pin_uv_protocol=pin_uv_protocol,
		)))
		if self.hid.transaction_error is not None:
			raise self.hid.transaction_error
		return self.hid.attestation

	def get_assertions(self, rp_id, client_data_hash, allow_list=None, extensions=None,
			options=None, pin_uv_param=None, pin_uv_protocol=None):
		self.hid.calls.append(("get_assertions", dict(
			rp_id=rp_id, client_data_hash=client_data_hash, allow_list=allow_list,
			options=options, pin_uv_param=pin_uv_param, pin_uv_protocol=pin_uv_protocol,
		)))
		if self.hid.transaction_error is not None:
			raise self.hid.transaction_error
		return self.hid.assertions


class FakeHid:
	def __init__(self):
		self.descriptors = []
		self.list_error = None
		self.open_error = None
		self.ctap2_error = None
		self.transaction_error = None
		self.pin = "1234"
		self.pin_supported = True
		self.pin_requests = []
		self.devices = []
		self.ctaps = []
		self.calls = []
		self.attestation = SimpleNamespace(
			fmt="packed",
			auth_data=auth_data(b"\xaa" * 37, credential_id=b"\x07\x07"),
			att_stmt={"alg": -7, "sig": b"\x30\x44"},
		)
		self.assertions = [
			SimpleNamespace(
				credential={"type": "public-key", "id": b"\x01\x02"},
				auth_data=b"\xa1" * 37,
				signature=b"\x51\x52",
				user={"id": b"\x09"},
			)
		]

	def descriptor(self, path, vid=0x1050, product="YubiKey 5 NFC"):
		return SimpleNamespace(path=path, vid=vid, pid=0x0407, product_name=product, serial_number=None)

	def list_descriptors(self):
		if self.list_error is not None:
			raise self.list_error
		return iter(self.descriptors)

	def open_device(self, path):
		if self.open_error is not None:
			raise self.open_error
		device = FakeHidDevice(path)
		self.devices.append(device)
		return device

	def client_pin_class(self):
		hid = self

		class FakeClientPin:
			PERMISSION = ClientPin.PERMISSION

			def __init__(self, ctap):
				if not hid.pin_supported:
					raise ValueError("Authenticator does not support ClientPin")
				self.protocol = SimpleNamespace(VERSION=2, authenticate=lambda key, message: b"mac:" + key + message[:4])

			def get_pin_token(self, pin, permissions=None, permissions_rpid=None):
				hid.pin_requests.append((pin, permissions, permissions_rpid))
				if pin != hid.pin:
					raise CtapError(CtapError.ERR.PIN_INVALID)
				return b"tok"

		return FakeClientPin


@pytest.fixture
def hid(monkeypatch):
	fake = FakeHid()
	monkeypatch.setattr(fido, "list_descriptors", fake.list_descriptors)
	monkeypatch.setattr(fido, "open_device", fake.open_device)
	monkeypatch.setattr(fido, "Ctap2", lambda device: FakeCtap2(fake, device))
	monkeypatch.setattr(fido, "ClientPin", fake.client_pin_class())
	return fake


@pytest.fixture
def open_dev(hid):
	dev = fido.Dev()
	assert dev.open("/dev/hidraw0") == FIDO_OK
	yield dev
	dev.close()
