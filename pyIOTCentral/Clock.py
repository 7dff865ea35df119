# -*- coding: utf-8 -*-
from threading import Event, Thread
from datetime import datetime, timezone
import logging
import time

TIMESTAMP_FORMAT = '%Y%m%d-%H%M%S'


def utcTimestamp(now=None):
    ''' Format a UTC time as YYYYMMDD-HHmmss.  Uses the current time if none is provided '''
    now = now if now is not None else datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class RepeatingTimer(Thread):
    ''' Calls a function every interval seconds until cancelled

    Args:
        interval (float): Seconds between calls
        callback (callable): Function to call.  Takes no arguments.
        log (callable, optional): Sink for log messages.  Default is the module logger.

    '''
    _logger = logging.getLogger(__name__)

    def __init__(self, interval, callback, log=None):
        super(RepeatingTimer, self).__init__(name='RepeatingTimer-{0}s'.format(interval), daemon=True)
        self._interval = interval
        self._callback = callback
        self._finished = Event()
        self._log = log if log is not None else self._logger.warning

    def run(self):
        while not self._finished.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                self._log('Timer callback failed.  Error: {0}'.format(e))

    def cancel(self):
        ''' Stop the timer.  Safe to call more than once '''
        self._finished.set()

    @property
    def active(self):
        return not self._finished.is_set()


class Clock(object):
    ''' Source of time for the agent.  Tests replace this with a clock they can advance by hand '''

    def now(self):
        return datetime.now(timezone.utc)

    def sleep(self, seconds):
        time.sleep(seconds)

    def every(self, interval, callback, log=None):
        ''' Start calling callback every interval seconds

        Args:
            interval (float): Seconds between calls
            callback (callable): Function to call.  Takes no arguments.
            log (callable, optional): Sink for callback failures

        Returns:
            A timer handle supporting `cancel()` and `active`

        '''
        timer = RepeatingTimer(interval, callback, log)
        timer.start()
        return timer
