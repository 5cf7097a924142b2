"""Core: dominio, configuración, errores y servicios de la CLI de M-Pesa."""
