"""Interfaces/abstracciones del Core.

Contratos (Protocol) que implementan los adaptadores concretos, de modo que
los servicios dependan de abstracciones y no del keychain del sistema.
"""
