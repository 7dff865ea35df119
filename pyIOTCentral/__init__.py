"""**A minimal python-based Internet of Things (IOT) device agent for Azure IoT Central.**

.. module:: pyIOTCentral

pyIOTCentral runs a single device against an Azure IoT Central application.  The device presents its identity (ID scope, device id and symmetric key) to the device provisioning service once, and receives the hub it has been assigned to.  From then on the agent cycles its hub connection on a fixed schedule: it connects, stays connected for a dwell period while sending a heartbeat telemetry point every ten seconds, disconnects, pauses and connects again.

While connected, the cloud can change the device's configuration by updating the desired properties of the device twin.  Each change is handed to a Reconciler which normalizes the values of the settings it knows about, stores them locally and acknowledges them by patching the reported properties of the twin.  Settings it does not know about are logged and ignored.

Failures never stop the device on their own.  They are logged and the agent carries on with its schedule; only a failed provisioning attempt ends the run.

"""

from pyIOTCentral.Config import DeviceIdentity, MissingSettingError, loadIdentity, configureLogging
from pyIOTCentral.Clock import Clock
from pyIOTCentral.Transport import Transport, AzureTransport, Twin, PropertyDelta, ConnectionErrorEvent
from pyIOTCentral.Provisioner import Provisioner, ConnectionDescriptor
from pyIOTCentral.Reconciler import Reconciler, setting
from pyIOTCentral.Session import SessionManager
from pyIOTCentral.Driver import Driver, start
