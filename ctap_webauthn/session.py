"""
Device session: one open handle, one blocking transaction.
"""

import logging

from . import fido
from .ctap import FIDO_OK
from .errors import DeviceOpenError, ProtocolError

logger = logging.getLogger(__name__)


class DeviceSession:
	"""Unopened -> Open -> Closed.

	The handle is closed as soon as the transaction returns, before its result
	is looked at, and again on any exit from a with-block. A session is never
	reused.
	"""

	UNOPENED = "unopened"
	OPEN = "open"
	CLOSED = "closed"

	def __init__(self, path):
		self.path = path
		self.state = self.UNOPENED
		self._dev = None

	def open(self):
		if self.state != self.UNOPENED:
			raise RuntimeError("device session is %s" % self.state)
		self._dev = fido.Dev()
		status = self._dev.open(self.path)
		if status != FIDO_OK:
			self.close()
			raise DeviceOpenError(self.path, status)
		self.state = self.OPEN
		logger.debug("opened %s", self.path)
		return self

	def close(self):
		if self._dev is not None:
			self._dev.close()
			self._dev = None
			logger.debug("closed %s", self.path)
		self.state = self.CLOSED

	def _transact(self, stage, method, obj, pin):
		if self.state != self.OPEN:
			raise RuntimeError("device session is %s" % self.state)
		call = getattr(self._dev, method)
		logger.debug("%s on %s (pin %s)", stage, self.path, "given" if pin else "not given")
		try:
			# blocks until the authenticator answers, possibly waiting on the user
			status = call(obj, pin or None)
		finally:
			self.close()
		if status != FIDO_OK:
			raise ProtocolError(stage, status)

	def make_credential(self, cred, pin=None):
		self._transact("make_credential", "make_cred", cred, pin)

	def get_assertion(self, assertion, pin=None):
		self._transact("get_assertion", "get_assert", assertion, pin)

	def __enter__(self):
		return self.open()

	def __exit__(self, *exc):
		self.close()
		return False
