from datetime import datetime, timedelta, timezone
from threading import Lock
from types import SimpleNamespace

from pyIOTCentral.Transport import Transport, Twin, PropertyDelta, ConnectionErrorEvent


class manualTimer(object):

    def __init__(self, clock, interval, callback):
        self._clock = clock
        self.interval = interval
        self.callback = callback
        self.due = clock.elapsed + interval
        self.active = True

    def cancel(self):
        self.active = False


class manualClock(object):
    ''' Clock whose time only moves when a test (or a sleeping driver) advances it '''

    def __init__(self, start=None):
        self._start = start if start is not None else datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.elapsed = 0.0
        self.timers = []
        self.sleeps = []

    def now(self):
        return self._start + timedelta(seconds=self.elapsed)

    def every(self, interval, callback, log=None):
        timer = manualTimer(self, interval, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds):
        ''' Move time forward, firing every timer tick that falls due on the way '''
        end = self.elapsed + seconds
        while True:
            due = [ t for t in self.timers if t.active and t.due <= end ]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.elapsed = timer.due
            timer.due += timer.interval
            timer.callback()
        self.elapsed = end

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.advance(seconds)

    @property
    def activeTimers(self):
        return [ t for t in self.timers if t.active ]


class simulatedHub(Transport):
    ''' Stands in for a hub connection.  Records everything the device sends and lets a test push cloud events

    Args:
        failOn (str, optional): Name of the method ('open', 'getTwin', 'attach', 'detach', 'close', 'sendEvent', 'patchReported') that should raise
        desired (dict, optional): Desired section of the twin document

    '''

    def __init__(self, failOn=None, desired=None):
        super(simulatedHub, self).__init__()
        self._rwlock = Lock()
        self._failOn = failOn
        self._desired = desired or {}
        self.isOpen = False
        self.closed = False
        self.sent = []
        self.reported = []

    def _check(self, name):
        if self._failOn == name:
            raise RuntimeError('simulated {0} failure'.format(name))

    def open(self):
        self._check('open')
        self.isOpen = True

    def close(self):
        self._check('close')
        self.isOpen = False
        self.closed = True

    def attach(self, sink):
        self._check('attach')
        super(simulatedHub, self).attach(sink)

    def detach(self):
        self._check('detach')
        super(simulatedHub, self).detach()

    @property
    def attached(self):
        return self._sink is not None

    def sendEvent(self, payload):
        self._check('sendEvent')
        with self._rwlock:
            self.sent.append(payload)

    def getTwin(self):
        self._check('getTwin')
        return Twin(self, { 'desired': self._desired, 'reported': {} })

    def patchReported(self, patch):
        self._check('patchReported')
        with self._rwlock:
            self.reported.append(dict(patch))

    ''' Cloud side '''
    def pushDesired(self, properties):
        self.dispatch(PropertyDelta(properties))

    def pushError(self, error):
        self.dispatch(ConnectionErrorEvent(error))


class hubFactory(object):
    ''' transportFactory that hands out a new simulatedHub per connect '''

    def __init__(self, **hubArgs):
        self._hubArgs = hubArgs
        self.hubs = []
        self.descriptors = []

    def __call__(self, descriptor):
        self.descriptors.append(descriptor)
        hub = simulatedHub(**self._hubArgs)
        self.hubs.append(hub)
        return hub

    @property
    def last(self):
        return self.hubs[-1]


class provisioningClient(object):
    ''' Stands in for the azure-iot-device provisioning client '''

    def __init__(self, assignedHub='hub1.example', deviceId=None, status='assigned', error=None):
        self._assignedHub = assignedHub
        self._deviceId = deviceId
        self._status = status
        self._error = error
        self.args = None
        self.registered = False

    def __call__(self, provisioningHost, registrationId, idScope, symmetricKey):
        self.args = (provisioningHost, registrationId, idScope, symmetricKey)
        return self

    def register(self):
        self.registered = True
        if self._error is not None:
            raise self._error
        state = SimpleNamespace(assigned_hub=self._assignedHub, device_id=self._deviceId or self.args[1])
        return SimpleNamespace(status=self._status, registration_state=state)


class fakeProvisioner(object):
    ''' Provisioner replacement that returns a fixed descriptor '''

    def __init__(self, descriptor):
        self._descriptor = descriptor
        self.calls = []

    def provision(self, identity):
        self.calls.append(identity)
        return self._descriptor


class logRecorder(list):
    ''' Log sink that keeps every message '''

    def __call__(self, message):
        self.append(message)

    def matching(self, text):
        return [ m for m in self if text in m ]
