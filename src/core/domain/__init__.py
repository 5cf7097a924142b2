"""Modelos y entidades del dominio.

Aquí viven las estructuras de datos puras (Pydantic v2): credenciales, token,
configuración y el ciclo petición/respuesta de estado de transacción. El
dominio no conoce HTTP, keyring ni la CLI.
"""
