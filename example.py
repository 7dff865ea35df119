# -*- coding: utf-8 -*-
from pyIOTCentral import Reconciler, SessionManager, configureLogging, setting, start


class folderReconciler(Reconciler):
    ''' Adds an upload folder setting next to the built-in SETTING_SAMPLE '''

    @setting('SETTING_UPLOAD_FOLDER')
    def uploadFolder(self, name, value):
        if value is None:
            return 'uploads'
        if not isinstance(value, str) or '/' in value or value in ('.', '..'):
            raise ValueError('{0} is not a valid folder name for {1}'.format(value, name))
        return value


if __name__ == u'__main__':

    configureLogging()
    start(session=SessionManager(reconciler=folderReconciler()))
