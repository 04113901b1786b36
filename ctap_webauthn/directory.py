"""
Device directory. Enumerates attached authenticators on every call; nothing
is cached since devices come and go between calls.
"""

import logging

from . import fido
from .ctap import FIDO_OK
from .errors import DeviceDiscoveryError, NoDeviceError
from .models import AuthenticatorDevice

logger = logging.getLogger(__name__)

MAX_DEVICES = 64


def list_devices():
	status, infos = fido.dev_info_manifest(MAX_DEVICES)
	if status != FIDO_OK:
		raise DeviceDiscoveryError(status)
	devices = [AuthenticatorDevice(i.path, i.manufacturer, i.product) for i in infos]
	logger.debug("found %d device(s)", len(devices))
	return devices


def select_default_device():
	"""Path of the first enumerated device."""
	status, infos = fido.dev_info_manifest(MAX_DEVICES)
	if status != FIDO_OK:
		raise NoDeviceError(status)
	if not infos:
		raise NoDeviceError()
	logger.debug("no device given, using %s (%s %s)", infos[0].path, infos[0].manufacturer, infos[0].product)
	return infos[0].path
