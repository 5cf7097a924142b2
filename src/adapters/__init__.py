"""Adaptadores de I/O: keychain del sistema y API Daraja (HTTP)."""
