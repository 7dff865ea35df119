# -*- coding: utf-8 -*-
from collections import namedtuple
import logging

from azure.iot.device import ProvisioningDeviceClient

from pyIOTCentral.Config import PROVISIONING_HOST


class ProvisioningError(Exception):
    ''' The provisioning service did not assign the device to a hub '''


class ConnectionDescriptor(namedtuple('ConnectionDescriptor', ['hostName', 'deviceId', 'sharedAccessKey'])):
    ''' Where and how to connect a provisioned device.  Renders as a hub connection string '''
    __slots__ = ()

    def __str__(self):
        return 'HostName={0};DeviceId={1};SharedAccessKey={2}'.format(self.hostName, self.deviceId, self.sharedAccessKey)


def symmetricKeyClient(provisioningHost, registrationId, idScope, symmetricKey):
    return ProvisioningDeviceClient.create_from_symmetric_key(
        provisioning_host=provisioningHost,
        registration_id=registrationId,
        id_scope=idScope,
        symmetric_key=symmetricKey)


class Provisioner(object):
    ''' Exchanges a device identity for a hub assignment using the device provisioning service.

    A single registration is attempted per call.  Failures are logged and reported by returning `None`; nothing is retried here.

    Args:
        provisioningHost (str, optional): Hostname of the provisioning service.  Default is the global endpoint.
        clientFactory (callable, optional): Called with (provisioningHost, registrationId, idScope, symmetricKey) to build the provisioning client.  Default uses the symmetric key client from azure-iot-device.
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, provisioningHost=PROVISIONING_HOST, clientFactory=None, log=None):
        self._provisioningHost = provisioningHost
        self._clientFactory = clientFactory if clientFactory is not None else symmetricKeyClient
        self._log = log if log is not None else self._logger.info

    def provision(self, identity):
        ''' Register the device and build its connection descriptor

        Args:
            identity (:obj:`DeviceIdentity`): The device to register

        Returns:
            :obj:`ConnectionDescriptor` on success, `None` if registration failed

        '''
        try:
            client = self._clientFactory(self._provisioningHost, identity.deviceId, identity.scopeId, identity.deviceKey)
            result = client.register()

            if result is None or result.status != 'assigned':
                raise ProvisioningError('registration was not assigned (status: {0})'.format(getattr(result, 'status', None)))

            state = result.registration_state
            descriptor = ConnectionDescriptor(state.assigned_hub, state.device_id, identity.deviceKey)
        except Exception as e:
            self._log('Failed to instantiate client interface from configuration: {0}'.format(e))
            return None

        self._log('DPS registration succeeded')
        return descriptor
