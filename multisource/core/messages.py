"""Locale-specific user-facing text.

Only strings the end user reads live here: failure answers, export layouts,
suggested questions and the system prompt language line.
"""

from __future__ import annotations

from datetime import datetime

DEFAULT_LOCALE = "pt-BR"

_STRINGS: dict[str, dict[str, str]] = {
    "pt-BR": {
        "query_failed": "Desculpe, ocorreu um erro ao processar sua pergunta: {error}",
        "max_iterations": (
            "Não consegui chegar a uma resposta final após {max_iterations} iterações."
        ),
        "answer_language": "Sempre forneça respostas claras e úteis em português.",
        "export_title": "# Histórico de Conversas",
        "exported_at": "Exportado em: {date}",
        "total_entries": "Total de entradas: {total}",
        "question": "Pergunta",
        "answer": "Resposta",
        "processing": "Processando sua pergunta...",
        "welcome": "Conectado ao Multi-Source AI Agent",
        "suggest_tables": "Que tabelas existem no banco {database}?",
        "suggest_rows": "Mostre alguns registros do banco {database}",
        "suggest_document": "O que contém o documento {document}?",
        "suggest_search": 'Busque por "economia" nos documentos disponíveis',
        "suggest_date": "Qual é a data e hora atual?",
        "suggest_weather": "Busque informações sobre o clima em São Paulo",
    },
    "en": {
        "query_failed": "Sorry, an error occurred while processing your question: {error}",
        "max_iterations": "I could not reach a final answer after {max_iterations} iterations.",
        "answer_language": "Always give clear and helpful answers in English.",
        "export_title": "# Conversation History",
        "exported_at": "Exported at: {date}",
        "total_entries": "Total entries: {total}",
        "question": "Question",
        "answer": "Answer",
        "processing": "Processing your question...",
        "welcome": "Connected to the Multi-Source AI Agent",
        "suggest_tables": "Which tables exist in the {database} database?",
        "suggest_rows": "Show some records from the {database} database",
        "suggest_document": "What does the document {document} contain?",
        "suggest_search": 'Search for "economy" in the available documents',
        "suggest_date": "What is the current date and time?",
        "suggest_weather": "Look up the weather in São Paulo",
    },
}

_DATETIME_FORMATS: dict[str, str] = {
    "pt-BR": "%d/%m/%Y, %H:%M:%S",
    "en": "%m/%d/%Y, %I:%M:%S %p",
}


def get_string(key: str, locale: str = DEFAULT_LOCALE, **params: object) -> str:
    """Return the formatted string for ``key``, falling back to the default locale."""

    table = _STRINGS.get(locale, _STRINGS[DEFAULT_LOCALE])
    template = table.get(key, _STRINGS[DEFAULT_LOCALE][key])
    return template.format(**params) if params else template


def format_local_datetime(value: datetime, locale: str = DEFAULT_LOCALE) -> str:
    """Render ``value`` in local time using the locale's date layout."""

    fmt = _DATETIME_FORMATS.get(locale, _DATETIME_FORMATS[DEFAULT_LOCALE])
    return value.astimezone().strftime(fmt)
