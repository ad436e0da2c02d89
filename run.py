"""
Production entry point.

Eventlet must patch the standard library before anything else imports it.
"""

import eventlet

eventlet.monkey_patch()

from app import main  # noqa: E402

if __name__ == '__main__':
    main()
