# -*- coding: utf-8 -*-
import logging

from pyIOTCentral.Clock import Clock, utcTimestamp
from pyIOTCentral.Config import SETTING_SAMPLE

VERSION_KEY = '$version'


def setting(name):
    ''' Decorates the method that normalizes values received for a device setting.

    The decorated method is called with the name of the setting and the value received from the cloud.  It must return the value the device will store and report back.  At construction time it is also called with a value of `None` to compute the setting's default.  If the received value can not be used, the method should raise a ValueError or a TypeError and the setting will be left unchanged.

    **Example:**

        .. code-block:: python

            class ThermostatReconciler(Reconciler):

                @setting('SETTING_TARGET_TEMP')
                def targetTemp(self, name, value):
                    if value is None:
                        return 20
                    value = float(value)
                    if not 5 <= value <= 35:
                        raise ValueError('{0} is out of range for {1}'.format(value, name))
                    return value

    '''

    def decorateinterface(func):
        func.__setting__ = name
        return func

    return decorateinterface


class Reconciler(object):
    ''' Applies desired-property changes pushed from the cloud to the local device configuration and acknowledges them with a reported-property patch.

    Only settings declared with :func:`setting` are accepted.  Anything else is logged and ignored.

    Args:
        clock (:obj:`Clock`, optional): Source of the current time
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, clock=None, log=None):
        self._clock = clock if clock is not None else Clock()
        self._log = log if log is not None else self._logger.info
        self.settings = self._initializeSettings()

    @setting(SETTING_SAMPLE)
    def sampleSetting(self, name, value):
        # NOTE: value is used verbatim; no validation that it is a legal folder name
        return value or utcTimestamp(self._clock.now())

    @classmethod
    def _settingHandlers(cls):
        handlers = {}
        for supercls in reversed(cls.__mro__):  # subclasses override the handlers of their parents
            for method in supercls.__dict__.values():
                name = getattr(method, '__setting__', None)
                if name is not None:
                    handlers[name] = method
        return handlers

    def _initializeSettings(self):
        return { name: handler(self, name, None) for name, handler in self._settingHandlers().items() }

    def onDesiredProperties(self, desired, report):
        ''' Handle one desired-property change notification

        Args:
            desired (`dict`): Setting names mapped to their new values.  The `$version` entry is skipped.
            report (callable): Called once with the patch of settings that changed, if any did

        Returns:
            The `dict` of settings that changed

        '''
        patchedProperties = {}
        try:
            handlers = self._settingHandlers()

            for name, value in desired.items():
                if name == VERSION_KEY:
                    continue

                handler = handlers.get(name)
                if handler is None:
                    self._log("Received desired property change for unknown setting '{0}'".format(name))
                    continue

                self._log('Updating setting: {0} with value: {1}'.format(name, value))
                try:
                    effective = handler(self, name, value)
                except (ValueError, TypeError) as e:
                    self._log('Unable to apply setting {0}.  Error: {1}'.format(name, e))
                    continue

                patchedProperties[name] = self.settings[name] = effective

            if patchedProperties:
                report(patchedProperties)
        except Exception as e:
            self._log('Exception while handling desired properties: {0}'.format(e))

        return patchedProperties
