# -*- coding: utf-8 -*-
from functools import partial
import logging
import json

from pyIOTCentral.Clock import Clock
from pyIOTCentral.Config import HEARTBEAT_INTERVAL, TELEMETRY_SYSTEM_HEARTBEAT
from pyIOTCentral.Reconciler import Reconciler
from pyIOTCentral.Transport import AzureTransport


class SessionManager(object):
    ''' Owns the live connection of a device to its hub.

    Each call to connect builds a new transport, fetches the device twin, attaches itself as the receiver of the transport's events and starts the heartbeat timer.  disconnect reverses all of it.  Neither call raises; failures are logged and the session is left disconnected.

    States move DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTING -> DISCONNECTED.

    Args:
        reconciler (:obj:`Reconciler`, optional): Handles desired-property changes.  Default is a Reconciler sharing this session's clock and log.
        transportFactory (callable, optional): Called with a connection descriptor, returns an unopened :obj:`Transport`.  Default builds an :obj:`AzureTransport`.
        clock (:obj:`Clock`, optional): Provides the heartbeat timer
        heartbeatInterval (float, optional): Seconds between heartbeats.  Default is 10.
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''
    _logger = logging.getLogger(__name__)

    DISCONNECTED = 'DISCONNECTED'
    CONNECTING = 'CONNECTING'
    CONNECTED = 'CONNECTED'
    DISCONNECTING = 'DISCONNECTING'

    def __init__(self, reconciler=None, transportFactory=None, clock=None, heartbeatInterval=HEARTBEAT_INTERVAL, log=None):
        self._log = log if log is not None else self._logger.info
        self._clock = clock if clock is not None else Clock()
        self._reconciler = reconciler if reconciler is not None else Reconciler(clock=self._clock, log=self._log)
        self._transportFactory = transportFactory if transportFactory is not None else partial(AzureTransport.fromConnectionString, log=self._log)
        self._heartbeatInterval = heartbeatInterval

        self._state = self.DISCONNECTED
        self._client = None
        self._twin = None
        self._healthTimer = None

    @property
    def state(self):
        return self._state

    @property
    def reconciler(self):
        return self._reconciler

    @property
    def heartbeatActive(self):
        return self._healthTimer is not None and self._healthTimer.active

    def connect(self, descriptor):
        ''' Open a connection using descriptor and start reporting liveness

        Args:
            descriptor (:obj:`ConnectionDescriptor`): Produced by the provisioning step

        '''
        if self._state != self.DISCONNECTED:
            self._log('Connect requested while {0}.  Ignoring'.format(self._state))
            return

        self._state = self.CONNECTING
        self._log('Connecting device...')

        client = None
        try:
            client = self._transportFactory(descriptor)
            if not client:
                self._log('Failed to connect device client interface from connection string - device: {0}'.format(getattr(descriptor, 'deviceId', '')))
                self._state = self.DISCONNECTED
                return

            client.open()
            twin = client.getTwin()
            client.attach(self)
            self._client, self._twin = client, twin

            self._log('Starting health timer...')
            self._healthTimer = self._clock.every(self._heartbeatInterval, self.sendHeartbeat, log=self._log)

            self._state = self.CONNECTED
            self._log('IoT Central successfully connected device: {0}'.format(getattr(descriptor, 'deviceId', '')))
        except Exception as e:
            self._log('IoT Central connection error: {0}'.format(e))
            self._abandon(client)

    def _abandon(self, client):
        ''' Undo a partially completed connect '''
        self._cancelHealthTimer()
        self._client = None
        self._twin = None
        if client:
            self._release(client, 'Error while releasing failed connection')
        self._state = self.DISCONNECTED

    def _release(self, client, failure):
        ''' Detach from client and close it.  A failed detach does not stop the close '''
        try:
            client.detach()
        except Exception as e:
            self._log('{0}: {1}'.format(failure, e))

        try:
            client.close()
        except Exception as e:
            self._log('{0}: {1}'.format(failure, e))

    def _cancelHealthTimer(self):
        if self._healthTimer is not None:
            self._healthTimer.cancel()
            self._healthTimer = None

    def disconnect(self):
        ''' Stop the heartbeat and close the connection.  Does nothing when already disconnected '''
        if self._state == self.DISCONNECTED:
            return

        self._state = self.DISCONNECTING
        self._log('Disconnecting the device...')

        try:
            # The timer goes first so no heartbeat starts against a closing connection
            self._log('Clearing health timer...')
            self._cancelHealthTimer()

            self._log('Disconnecting device...')
            client = self._client
            if client is not None:
                self._release(client, 'Error while disconnecting device')
        except Exception as e:
            self._log('Error while disconnecting device: {0}'.format(e))
        finally:
            self._client = None
            self._twin = None
            self._state = self.DISCONNECTED

    def handlePropertyDelta(self, event):
        ''' Receives desired-property changes from the transport '''
        self._reconciler.onDesiredProperties(event.properties, self.updateReportedProperties)

    def handleConnectionError(self, event):
        ''' Receives asynchronous transport errors.  The connection is kept until the scheduled disconnect '''
        self._log('Device client connection error: {0}'.format(event.error))

    def sendHeartbeat(self):
        self.sendMeasurement({ TELEMETRY_SYSTEM_HEARTBEAT: 1 })

    def sendMeasurement(self, data):
        ''' Send data (`dict`) as one telemetry message.  Ignored when there is no open connection '''
        client = self._client
        if not data or client is None:
            return

        try:
            self._log('Sending telemetry: {0}'.format(json.dumps(data, indent=4)))
            client.sendEvent(json.dumps(data))
        except Exception as e:
            self._log('sendMeasurement: {0}'.format(e))

    def updateReportedProperties(self, properties):
        ''' Merge properties (`dict`) into the reported section of the device twin.  Ignored when there is no twin '''
        twin = self._twin
        if not properties or twin is None:
            return

        self._log('Updating twin properties: {0}'.format(json.dumps(properties, indent=4)))

        try:
            twin.updateReported(properties)
        except Exception as e:
            self._log('Error updating device properties: {0}'.format(e))
