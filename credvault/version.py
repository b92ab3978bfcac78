"""Credvault Meta information.
   Credvault keeps per-user credentials encrypted at rest and gates them
   behind an account password and a master password.
"""
__title__ = 'credvault'
__description__ = (
   'Credvault keeps per-user credentials encrypted at rest '
   'and gates them behind an account password and a master password.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 Credvault Developers'
__author__ = 'Credvault Developers'
__license__ = 'Apache-2.0'
