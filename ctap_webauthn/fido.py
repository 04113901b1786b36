"""
Binding to the authenticator library (python-fido2).

Keeps the shape of a C FIDO2 library: enumeration into a bounded manifest,
credential and assertion objects filled in through setters, and a device
handle that runs one blocking transaction. Calls report an integer status
(FIDO_OK on success) rather than raising; strerr() gives the diagnostic.
"""

import logging
import threading
from collections import namedtuple
from dataclasses import dataclass
from itertools import islice

import cbor2
from fido2.ctap import CtapError
from fido2.ctap2 import Ctap2
from fido2.ctap2.pin import ClientPin
from fido2.hid import list_descriptors, open_device

from .ctap import (
	CTAP2_ERR_UNSUPPORTED_OPTION,
	FIDO_ERR_INTERNAL,
	FIDO_ERR_INVALID_ARGUMENT,
	FIDO_ERR_NOTFOUND,
	FIDO_ERR_RX,
	FIDO_ERR_TX,
	FIDO_ERR_UNSUPPORTED,
	FIDO_OK,
	describe,
	getAssertionKeys,
	makeCredentialKeys,
	strerr,
)

logger = logging.getLogger(__name__)

FIDO_DEBUG = 0x01

# tri-state authenticator options
FIDO_OPT_OMIT = 0
FIDO_OPT_FALSE = 1
FIDO_OPT_TRUE = 2

COSE_ES256 = -7
COSE_EDDSA = -8
COSE_RS256 = -257

MAX_USER_ID_LEN = 64

usb_vendors = {
  0x0483: 'STMicroelectronics',
  0x096e: 'Feitian',
  0x1050: 'Yubico',
  0x18d1: 'Google',
  0x20a0: 'Nitrokey',
  0x2c97: 'Ledger',
}

_lock = threading.Lock()
_initialized = False

def init(flags=0):
	"""Process-wide library setup. Only the first call has any effect."""
	global _initialized
	with _lock:
		if _initialized:
			return
		if flags & FIDO_DEBUG:
			logging.getLogger('fido2').setLevel(logging.DEBUG)
			logging.getLogger(__package__).setLevel(logging.DEBUG)
		_initialized = True
		logger.debug("fido library initialized (flags=0x%02x)", flags)

def vendor_name(vid):
	return usb_vendors.get(vid, '0x%04x' % (vid or 0))

def _view(buf):
	return memoryview(buf).toreadonly()

def _check_opt(opt):
	return opt in (FIDO_OPT_OMIT, FIDO_OPT_FALSE, FIDO_OPT_TRUE)

### enumeration

@dataclass(frozen=True)
class DevInfo:
	path: str
	manufacturer: str
	product: str

def dev_info_manifest(ilen):
	"""Up to ilen attached authenticators, in the order the HID layer reports them."""
	try:
		descriptors = list(islice(list_descriptors(), ilen))
	except OSError as e:
		logger.debug("HID enumeration failed: %s", e)
		return FIDO_ERR_INTERNAL, []
	infos = []
	for d in descriptors:
		path = d.path.decode() if isinstance(d.path, bytes) else d.path
		infos.append(DevInfo(path, vendor_name(d.vid), d.product_name or ''))
	return FIDO_OK, infos

### credential

class Cred:
	"""Parameters and outputs of one makeCredential transaction."""

	def __init__(self):
		self.type = None
		self.rp_id = None
		self.rp_name = None
		self.user_id = None
		self.user_name = None
		self.user_display_name = None
		self.clientdata_hash = None
		self.rk = FIDO_OPT_OMIT
		self.uv = FIDO_OPT_OMIT
		self.fmt = None
		self._id = bytearray()
		self._authdata = bytearray()
		self._attestation = bytearray()
		self.freed = False

	def set_type(self, alg):
		if alg not in (COSE_ES256, COSE_EDDSA, COSE_RS256):
			return FIDO_ERR_INVALID_ARGUMENT
		self.type = alg
		return FIDO_OK

	def set_rp(self, rp_id, name=None):
		if not rp_id:
			return FIDO_ERR_INVALID_ARGUMENT
		self.rp_id = rp_id
		self.rp_name = name
		return FIDO_OK

	def set_user(self, user_id, name=None, display_name=None):
		if not user_id or len(user_id) > MAX_USER_ID_LEN:
			return FIDO_ERR_INVALID_ARGUMENT
		self.user_id = bytes(user_id)
		self.user_name = name
		self.user_display_name = display_name
		return FIDO_OK

	def set_clientdata_hash(self, clientdata_hash):
		if not clientdata_hash:
			return FIDO_ERR_INVALID_ARGUMENT
		self.clientdata_hash = bytes(clientdata_hash)
		return FIDO_OK

	def set_rk(self, opt):
		if not _check_opt(opt):
			return FIDO_ERR_INVALID_ARGUMENT
		self.rk = opt
		return FIDO_OK

	def set_uv(self, opt):
		if not _check_opt(opt):
			return FIDO_ERR_INVALID_ARGUMENT
		self.uv = opt
		return FIDO_OK

	def set_output(self, cred_id, authdata, attestation, fmt=None):
		self._id = bytearray(cred_id)
		self._authdata = bytearray(authdata)
		self._attestation = bytearray(attestation)
		self.fmt = fmt

	@property
	def id(self):
		return _view(self._id)

	@property
	def authdata(self):
		return _view(self._authdata)

	@property
	def attestation(self):
		return _view(self._attestation)

	def free(self):
		self._id = bytearray()
		self._authdata = bytearray()
		self._attestation = bytearray()
		self.clientdata_hash = None
		self.user_id = None
		self.freed = True

### assertion

Stmt = namedtuple('Stmt', 'id authdata sig user_id')

class Assert:
	"""Parameters and outputs of one getAssertion transaction."""

	def __init__(self):
		self.rp_id = None
		self.clientdata_hash = None
		self.allow_list = []
		self.uv = FIDO_OPT_OMIT
		self._stmts = []
		self.freed = False

	def set_rp(self, rp_id):
		if not rp_id:
			return FIDO_ERR_INVALID_ARGUMENT
		self.rp_id = rp_id
		return FIDO_OK

	def set_clientdata_hash(self, clientdata_hash):
		if not clientdata_hash:
			return FIDO_ERR_INVALID_ARGUMENT
		self.clientdata_hash = bytes(clientdata_hash)
		return FIDO_OK

	def allow_cred(self, cred_id):
		if not cred_id:
			return FIDO_ERR_INVALID_ARGUMENT
		self.allow_list.append(bytes(cred_id))
		return FIDO_OK

	def set_uv(self, opt):
		if not _check_opt(opt):
			return FIDO_ERR_INVALID_ARGUMENT
		self.uv = opt
		return FIDO_OK

	def add_output(self, cred_id, authdata, sig, user_id=b''):
		self._stmts.append(Stmt(bytearray(cred_id), bytearray(authdata), bytearray(sig), bytearray(user_id or b'')))

	def count(self):
		return len(self._stmts)

	def _field(self, idx, name):
		if idx >= len(self._stmts):
			return _view(b'')
		return _view(getattr(self._stmts[idx], name))

	def id(self, idx):
		return self._field(idx, 'id')

	def authdata(self, idx):
		return self._field(idx, 'authdata')

	def sig(self, idx):
		return self._field(idx, 'sig')

	def user_id(self, idx):
		return self._field(idx, 'user_id')

	def free(self):
		self._stmts = []
		self.allow_list = []
		self.clientdata_hash = None
		self.freed = True

### device

class Dev:
	"""Handle to one authenticator. Open by path, close when done."""

	def __init__(self):
		self.path = None
		self._device = None
		self._ctap = None

	def is_open(self):
		return self._ctap is not None

	def open(self, path):
		try:
			device = open_device(path)
		except FileNotFoundError:
			return FIDO_ERR_NOTFOUND
		except OSError as e:
			logger.debug("open %s failed: %s", path, e)
			return FIDO_ERR_TX
		try:
			self._ctap = Ctap2(device)
		except CtapError as e:
			device.close()
			return int(e.code)
		except ValueError:
			# CTAP1-only authenticator
			device.close()
			return FIDO_ERR_UNSUPPORTED
		except OSError as e:
			logger.debug("getInfo on %s failed: %s", path, e)
			device.close()
			return FIDO_ERR_RX
		self._device = device
		self.path = path
		return FIDO_OK

	def close(self):
		self._ctap = None
		if self._device is not None:
			self._device.close()
			self._device = None

	def _pin_uv_auth(self, pin, permission, rp_id, clientdata_hash):
		try:
			client_pin = ClientPin(self._ctap)
		except ValueError:
			raise CtapError(CTAP2_ERR_UNSUPPORTED_OPTION)
		token = client_pin.get_pin_token(pin, permission, rp_id)
		return client_pin.protocol.authenticate(token, clientdata_hash), client_pin.protocol.VERSION

	def _transact(self, name, call):
		try:
			return FIDO_OK, call()
		except CtapError as e:
			status = int(e.code)
			logger.debug("%s failed: %s", name, strerr(status))
			return status, None
		except OSError as e:
			logger.debug("%s transport error: %s", name, e)
			return FIDO_ERR_TX, None
		except (ValueError, TypeError, KeyError) as e:
			# response python-fido2 could not parse
			logger.debug("%s malformed response: %s", name, e)
			return FIDO_ERR_RX, None

	def make_cred(self, cred, pin=None):
		if not self.is_open():
			return FIDO_ERR_INVALID_ARGUMENT
		if None in (cred.type, cred.rp_id, cred.user_id, cred.clientdata_hash):
			return FIDO_ERR_INVALID_ARGUMENT

		def run():
			rp = {'id': cred.rp_id}
			if cred.rp_name is not None:
				rp['name'] = cred.rp_name
			user = {'id': cred.user_id}
			if cred.user_name is not None:
				user['name'] = cred.user_name
			if cred.user_display_name is not None:
				user['displayName'] = cred.user_display_name
			params = {
				1: cred.clientdata_hash,
				2: rp,
				3: user,
				4: [{'type': 'public-key', 'alg': cred.type}],
			}
			options = {}
			if cred.rk != FIDO_OPT_OMIT:
				options['rk'] = cred.rk == FIDO_OPT_TRUE
			if pin:
				params[8], params[9] = self._pin_uv_auth(pin, ClientPin.PERMISSION.MAKE_CREDENTIAL, cred.rp_id, cred.clientdata_hash)
			elif cred.uv != FIDO_OPT_OMIT:
				options['uv'] = cred.uv == FIDO_OPT_TRUE
			if options:
				params[7] = options
			logger.debug("makeCredential: %s", describe(params, makeCredentialKeys))
			return self._ctap.make_credential(*(params.get(k) for k in range(1, 10)))

		status, response = self._transact('makeCredential', run)
		if status != FIDO_OK:
			return status
		auth_data = response.auth_data
		credential_data = getattr(auth_data, 'credential_data', None)
		cred_id = credential_data.credential_id if credential_data is not None else b''
		attestation = cbor2.dumps({'fmt': response.fmt, 'attStmt': dict(response.att_stmt), 'authData': bytes(auth_data)}, canonical=True)
		cred.set_output(cred_id, auth_data, attestation, response.fmt)
		return FIDO_OK

	def get_assert(self, assertion, pin=None):
		if not self.is_open():
			return FIDO_ERR_INVALID_ARGUMENT
		if None in (assertion.rp_id, assertion.clientdata_hash):
			return FIDO_ERR_INVALID_ARGUMENT

		def run():
			params = {
				1: assertion.rp_id,
				2: assertion.clientdata_hash,
			}
			if assertion.allow_list:
				params[3] = [{'type': 'public-key', 'id': i} for i in assertion.allow_list]
			options = {}
			if pin:
				params[6], params[7] = self._pin_uv_auth(pin, ClientPin.PERMISSION.GET_ASSERTION, assertion.rp_id, assertion.clientdata_hash)
			elif assertion.uv != FIDO_OPT_OMIT:
				options['uv'] = assertion.uv == FIDO_OPT_TRUE
			if options:
				params[5] = options
			logger.debug("getAssertion: %s", describe(params, getAssertionKeys))
			return self._ctap.get_assertions(*(params.get(k) for k in range(1, 8)))

		status, responses = self._transact('getAssertion', run)
		if status != FIDO_OK:
			return status
		stmts = []
		for r in responses:
			if r.credential:
				cred_id = r.credential['id']
			elif len(assertion.allow_list) == 1:
				# the credential may be omitted when exactly one was allowed
				cred_id = assertion.allow_list[0]
			else:
				logger.debug("getAssertion response names no credential")
				return FIDO_ERR_RX
			user = r.user or {}
			stmts.append((cred_id, r.auth_data, r.signature, user.get('id', b'')))
		for stmt in stmts:
			assertion.add_output(*stmt)
		return FIDO_OK
