from types import SimpleNamespace
from unittest import mock

import pytest
from azure.iot.device import ProvisioningDeviceClient

from pyIOTCentral import ConnectionDescriptor, DeviceIdentity, Provisioner
from pyIOTCentral.Provisioner import symmetricKeyClient

from tests import simulator

IDENTITY = DeviceIdentity(scopeId='s1', deviceId='d1', deviceKey='k1')


@pytest.fixture
def log():
    return simulator.logRecorder()


def test_provision(log):
    client = simulator.provisioningClient(assignedHub='hub1.example')
    descriptor = Provisioner(clientFactory=client, log=log).provision(IDENTITY)

    assert(str(descriptor)=='HostName=hub1.example;DeviceId=d1;SharedAccessKey=k1')
    assert(descriptor==ConnectionDescriptor('hub1.example', 'd1', 'k1'))
    assert(client.args==('global.azure-devices-provisioning.net', 'd1', 's1', 'k1'))
    assert(log==['DPS registration succeeded'])

def test_provision_uses_assigned_device_id(log):
    client = simulator.provisioningClient(assignedHub='hub2.example', deviceId='d1-assigned')
    descriptor = Provisioner(provisioningHost='dps.example', clientFactory=client, log=log).provision(IDENTITY)

    assert(str(descriptor)=='HostName=hub2.example;DeviceId=d1-assigned;SharedAccessKey=k1')
    assert(client.args[0]=='dps.example')

def test_provision_service_error(log):
    client = simulator.provisioningClient(error=RuntimeError('service unreachable'))
    descriptor = Provisioner(clientFactory=client, log=log).provision(IDENTITY)

    assert(descriptor is None)
    assert(log==['Failed to instantiate client interface from configuration: service unreachable'])

def test_provision_not_assigned(log):
    client = simulator.provisioningClient(status='failed')
    descriptor = Provisioner(clientFactory=client, log=log).provision(IDENTITY)

    assert(descriptor is None)
    assert(log.matching('registration was not assigned (status: failed)'))

def test_provision_factory_error(log):

    def brokenFactory(*args):
        raise ValueError('bad symmetric key')

    assert(Provisioner(clientFactory=brokenFactory, log=log).provision(IDENTITY) is None)
    assert(log.matching('bad symmetric key'))

def test_default_factory_uses_symmetric_key():
    with mock.patch('pyIOTCentral.Provisioner.ProvisioningDeviceClient') as pdc:
        symmetricKeyClient('host', 'd1', 's1', 'k1')

    pdc.create_from_symmetric_key.assert_called_once_with(provisioning_host='host', registration_id='d1', id_scope='s1', symmetric_key='k1')

def test_provision_with_symmetric_key_client(log):
    identity = DeviceIdentity(scopeId='s1', deviceId='d1', deviceKey='c2VjcmV0LWRldmljZS1rZXk=')
    state = SimpleNamespace(assigned_hub='hub1.example', device_id='d1')
    result = SimpleNamespace(status='assigned', registration_state=state)

    with mock.patch.object(ProvisioningDeviceClient, 'register', return_value=result) as register:
        descriptor = Provisioner(log=log).provision(identity)

    register.assert_called_once_with()
    assert(str(descriptor)=='HostName=hub1.example;DeviceId=d1;SharedAccessKey=c2VjcmV0LWRldmljZS1rZXk=')
    assert(log==['DPS registration succeeded'])
