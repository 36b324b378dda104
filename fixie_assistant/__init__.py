"""
Клиент OpenAI Assistants с инструментом поиска по корпусу знаний Fixie.
"""

__version__ = "1.0.0"
