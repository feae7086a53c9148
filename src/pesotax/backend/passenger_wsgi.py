"""WSGI entrypoint for deploying the PesoTax backend behind Passenger."""

from pesotax.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
