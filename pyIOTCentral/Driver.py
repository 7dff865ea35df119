# -*- coding: utf-8 -*-
import logging
import platform

import psutil

from pyIOTCentral.Clock import Clock
from pyIOTCentral.Config import CONNECTED_DWELL, RECONNECT_COOLDOWN, MissingSettingError, loadIdentity
from pyIOTCentral.Provisioner import Provisioner
from pyIOTCentral.Session import SessionManager

_logger = logging.getLogger(__name__)


class Driver(object):
    ''' Top level control loop of the device agent.

    Provisions the device once, then cycles the session forever: connect, hold the connection for the dwell period, disconnect, pause for the cool-down period.  The reconnect happens on this fixed schedule whether or not the transport reported problems.

    Args:
        identity (:obj:`DeviceIdentity`): The device to run as
        provisioner (:obj:`Provisioner`, optional): Default is a Provisioner sharing this driver's log
        session (:obj:`SessionManager`, optional): Default is a SessionManager sharing this driver's clock and log
        clock (:obj:`Clock`, optional): Provides the dwell and cool-down waits
        dwell (float, optional): Seconds to stay connected each cycle.  Default is 30.
        cooldown (float, optional): Seconds to wait after disconnecting.  Default is 2.
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, identity, provisioner=None, session=None, clock=None, dwell=CONNECTED_DWELL, cooldown=RECONNECT_COOLDOWN, log=None):
        self._identity = identity
        self._log = log if log is not None else self._logger.info
        self._clock = clock if clock is not None else Clock()
        self._provisioner = provisioner if provisioner is not None else Provisioner(log=self._log)
        self._session = session if session is not None else SessionManager(clock=self._clock, log=self._log)
        self._dwell = dwell
        self._cooldown = cooldown

    @property
    def session(self):
        return self._session

    def run(self, cycles=None):
        ''' Provision and then cycle the connection

        Args:
            cycles (int, optional): Stop after this many connect/disconnect cycles.  Default is to run forever.

        Returns:
            `False` if provisioning failed or an unexpected error ended the run, otherwise `True`

        '''
        try:
            self._log('Starting device registration...')
            descriptor = self._provisioner.provision(self._identity)
            if not descriptor:
                self._log(' Failed to obtain connection string for device.')
                return False

            completed = 0
            while cycles is None or completed < cycles:
                self._session.connect(descriptor)
                self._clock.sleep(self._dwell)
                self._session.disconnect()
                self._clock.sleep(self._cooldown)
                completed += 1
            return True
        except Exception as e:
            self._log('Error starting process: {0}'.format(e))
            return False


def machineSummary():
    memory = psutil.virtual_memory()
    return ' > Machine: {0}, {1} core, freemem={2:.0f}mb, totalmem={3:.0f}mb'.format(
        platform.system(), psutil.cpu_count() or 1, memory.available / 1024 / 1024, memory.total / 1024 / 1024)


def start(environ=None, log=None, **driverArgs):
    ''' Run the device agent until interrupted

    Args:
        environ (`dict`, optional): Source of scopeId, deviceId and deviceKey.  Default is the process environment (and a `.env` file).
        log (callable, optional): Sink for log messages.  Default is the module logger.
        **driverArgs: Passed through to :obj:`Driver`

    Returns:
        `False` if the agent could not start or stopped because of an error

    '''
    log = log if log is not None else _logger.info
    log('Starting IoT Central device...')
    log(machineSummary())

    try:
        identity = loadIdentity(environ)
    except MissingSettingError:
        log('Error - missing required environment variables scopeId, deviceId, deviceKey')
        return False

    driver = Driver(identity, log=log, **driverArgs)
    try:
        return driver.run()
    except KeyboardInterrupt:
        log('Interrupted.  Shutting down')
        driver.session.disconnect()
        return True
