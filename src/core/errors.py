"""Excepciones específicas del modelo químico."""


class ChemGraphError(Exception):
    """Clase base de los errores del grafo químico."""


class UnknownElementError(ChemGraphError, KeyError):
    """Se lanza cuando un símbolo no existe en el registro de elementos."""


class GraphTopologyError(ChemGraphError, ValueError):
    """Se lanza ante enlaces que romperían un grafo simple (bucles o duplicados)."""
