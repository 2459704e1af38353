"""Flat-file JSON collection store and SMTP relay microservices.

This package provides two independent HTTP services:

- A collection store keeping one JSON document per named collection on local
  disk, with timestamped backups taken before every mutation
- A mail relay translating a JSON email description into a single SMTP
  submission over implicit TLS, with base64 attachments

Example:
    Building both applications::

        from jsondb_mail.db_api import create_db_app
        from jsondb_mail.mail_api import create_mail_app
        from jsondb_mail.relay import MailRelay
        from jsondb_mail.store import CollectionStore

        db_app = create_db_app(CollectionStore("/data/database"))
        mail_app = create_mail_app(MailRelay())
"""

__version__ = "0.1.0"
