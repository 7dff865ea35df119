# -*- coding: utf-8 -*-
from collections import namedtuple
import logging

from azure.iot.device import IoTHubDeviceClient, Message

PropertyDelta = namedtuple('PropertyDelta', ['properties'])
ConnectionErrorEvent = namedtuple('ConnectionErrorEvent', ['error'])


class Twin(object):
    ''' Property-sync handle for a connected device

    Args:
        transport (:obj:`Transport`): The transport the twin was fetched through
        document (`dict`, optional): The twin document holding `desired` and `reported` sections

    '''

    def __init__(self, transport, document=None):
        document = document or {}
        self._transport = transport
        self.desired = dict(document.get('desired') or {})
        self.reported = dict(document.get('reported') or {})

    def updateReported(self, patch):
        ''' Merge patch into the reported properties of the cloud twin '''
        self._transport.patchReported(patch)
        self.reported.update(patch)


class Transport(object):
    ''' Connection to the cloud hub for a single device.

    A transport pushes inbound traffic to one sink as typed events.  `PropertyDelta` events go to `sink.handlePropertyDelta` and `ConnectionErrorEvent` events go to `sink.handleConnectionError`.  Override the I/O methods to support a specific hub protocol.

    Events are dispatched on whatever thread the underlying client delivers them on.  The sink is expected to tolerate being called off its own control flow.

    Args:
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, log=None):
        self._sink = None
        self._log = log if log is not None else self._logger.debug

    def attach(self, sink):
        ''' Start delivering inbound events to sink '''
        self._sink = sink

    def detach(self):
        ''' Stop delivering inbound events.  Safe to call when nothing is attached '''
        self._sink = None

    def dispatch(self, event):
        sink = self._sink
        if sink is None:
            self._log('No sink attached.  Dropping {0}'.format(type(event).__name__))
            return

        if isinstance(event, PropertyDelta):
            sink.handlePropertyDelta(event)
        elif isinstance(event, ConnectionErrorEvent):
            sink.handleConnectionError(event)
        else:
            raise TypeError('{0} is not a transport event'.format(type(event).__name__))

    ''' Override these methods to implement a transport '''
    def open(self):
        raise NotImplementedError

    def close(self):
        raise NotImplementedError

    def sendEvent(self, payload):
        ''' Send payload (`str`) as the body of one device-to-cloud message '''
        raise NotImplementedError

    def getTwin(self):
        ''' Fetch the device twin

        Returns:
            :obj:`Twin`

        '''
        raise NotImplementedError

    def patchReported(self, patch):
        raise NotImplementedError


class AzureTransport(Transport):
    ''' Transport to an Azure IoT hub using the azure-iot-device client

    The client calls the desired-patch and background-exception handlers on its own handler thread, so events reach the sink off the thread that called connect.  Setting changes are therefore applied on that handler thread.

    Args:
        client (:obj:`IoTHubDeviceClient`): An unconnected device client
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''

    def __init__(self, client, log=None):
        super(AzureTransport, self).__init__(log)
        self._client = client

    @classmethod
    def fromConnectionString(cls, connectionString, log=None):
        return cls(IoTHubDeviceClient.create_from_connection_string(str(connectionString)), log)

    def attach(self, sink):
        super(AzureTransport, self).attach(sink)
        self._client.on_twin_desired_properties_patch_received = self._desiredPatchReceived
        self._client.on_background_exception = self._backgroundException

    def detach(self):
        self._client.on_twin_desired_properties_patch_received = None
        self._client.on_background_exception = None
        super(AzureTransport, self).detach()

    def _desiredPatchReceived(self, patch):
        self.dispatch(PropertyDelta(patch))

    def _backgroundException(self, error):
        self.dispatch(ConnectionErrorEvent(error))

    def open(self):
        self._client.connect()

    def close(self):
        # shutdown releases the client for good; a new transport is built for every connection
        self._client.shutdown()

    def sendEvent(self, payload):
        message = Message(payload, content_encoding='utf-8', content_type='application/json')
        self._client.send_message(message)

    def getTwin(self):
        return Twin(self, self._client.get_twin())

    def patchReported(self, patch):
        self._client.patch_twin_reported_properties(patch)
