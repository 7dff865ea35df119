# -*- coding: utf-8 -*-
import logging
import os
import sys
from collections import namedtuple

from dotenv import load_dotenv

PROVISIONING_HOST = 'global.azure-devices-provisioning.net'

HEARTBEAT_INTERVAL = 10 # seconds between heartbeat telemetry points while connected
CONNECTED_DWELL = 30 # seconds a connection is held open each cycle
RECONNECT_COOLDOWN = 2 # seconds to pause between disconnect and the next connect

TELEMETRY_SYSTEM_HEARTBEAT = 'TELEMETRY_SYSTEM_HEARTBEAT'
SETTING_SAMPLE = 'SETTING_SAMPLE'

REQUIRED_SETTINGS = ('scopeId', 'deviceId', 'deviceKey')

DeviceIdentity = namedtuple('DeviceIdentity', REQUIRED_SETTINGS)
DeviceIdentity.__doc__ = ''' Identity a device presents to the provisioning service.  Fixed for the life of the process.

    Args:
        scopeId (str): ID scope of the IoT Central application
        deviceId (str): Registration id of the device
        deviceKey (str): Symmetric key of the device

'''


class MissingSettingError(ValueError):
    ''' Raised when one or more of the required identity settings is absent or empty '''

    def __init__(self, missing):
        self.missing = list(missing)
        super(MissingSettingError, self).__init__('missing required environment variables {0}'.format(', '.join(self.missing)))


def loadIdentity(environ=None, envFile=None):
    ''' Build a DeviceIdentity from the environment

    When no mapping is supplied, a `.env` file is loaded first (without overriding variables that are already set) and the process environment is used.

    Args:
        environ (`dict`, optional): Mapping to read the settings from instead of the process environment
        envFile (`str`, optional): Path of the `.env` file to load.  Default is to search from the current directory

    Returns:
        :obj:`DeviceIdentity`

    Raises:
        MissingSettingError: if scopeId, deviceId or deviceKey is missing or empty

    '''
    if environ is None:
        load_dotenv(envFile, override=False)
        environ = os.environ

    missing = [ name for name in REQUIRED_SETTINGS if not environ.get(name) ]
    if missing:
        raise MissingSettingError(missing)

    return DeviceIdentity(**{ name: environ[name] for name in REQUIRED_SETTINGS })


def configureLogging(level=logging.INFO):
    ''' Send pyIOTCentral log output to stdout '''
    root = logging.getLogger('pyIOTCentral')
    root.setLevel(level)
    if not root.handlers:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(logging.Formatter('%(message)s'))
        root.addHandler(ch)
    return root
