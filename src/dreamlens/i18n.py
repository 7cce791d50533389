"""Internationalization (i18n) strings for DreamLens.

Every message that can reach an end user (errors, connection-test results,
placeholders) lives here. Keep translations short and name the provider.
"""

from __future__ import annotations

LANG_EN = "en"
LANG_RU = "ru"

SUPPORTED_LANGS = (LANG_EN, LANG_RU)

LANG_LABELS: dict[str, str] = {
    LANG_EN: "English",
    LANG_RU: "Russian",
}


STRINGS: dict[str, dict[str, str]] = {
    LANG_EN: {
        # Configuration
        "ERR_NO_ACTIVE_PROVIDER": (
            "No active AI provider is configured for the '{task}' task. "
            "Check the provider settings in the admin panel."
        ),
        "ERR_NO_DEFAULT_MODEL": (
            "Provider {provider} has no default model for the '{task}' task. "
            "Configure a default model in the admin panel."
        ),
        "ERR_MODEL_NOT_FOUND": (
            "AI model '{model_id}' configured for {provider} ('{task}' task) was not found."
        ),
        "ERR_MODEL_PROVIDER_MISMATCH": (
            "Model {model} belongs to provider type '{model_type}', "
            "but {provider} is of type '{provider_type}'."
        ),
        "ERR_UNKNOWN_PROVIDER_TYPE": (
            "Unknown AI provider type: {provider_type}. Supported types: {supported}"
        ),
        "ERR_BASE_URL_REQUIRED": "Provider {provider} requires a base URL.",
        "ERR_STORE_UNAVAILABLE": "Could not load AI provider configuration: {detail}",
        # Upstream
        "ERR_API_KEY_MISSING": (
            "API key not found for {provider}. Please set {env_name} in the environment."
        ),
        "ERR_AUTH_REJECTED": (
            "Authentication error: check the API key for {provider} ({env_name})."
        ),
        "ERR_RATE_LIMIT": (
            "{provider}: request limit exceeded. Please wait a moment and try again."
        ),
        "ERR_UPSTREAM_UNAVAILABLE": (
            "{provider} server is temporarily unavailable. Please try again later."
        ),
        "ERR_UPSTREAM_TIMEOUT": (
            "{provider} did not respond within {timeout:.0f} seconds. Please try again later."
        ),
        "ERR_IMAGE_PROVIDER_UNSUPPORTED": (
            "{provider} does not support image generation. "
            "Use another provider (Gemini, DALL-E)."
        ),
        "ERR_IMAGE_MODEL_UNSUPPORTED": (
            "Model {model} ({provider}) does not support image generation."
        ),
        "ERR_ANALYSIS_FAILED": "Analysis error ({provider}): {detail}",
        "ERR_IMAGE_FAILED": "Image generation error ({provider}): {detail}",
        "ERR_NO_IMAGE_DATA": "{provider} returned no image data.",
        "ERR_IMAGE_DOWNLOAD_FAILED": "Failed to download the generated image: HTTP {status}",
        # Response format
        "ERR_EMPTY_RESPONSE": "{provider} returned an empty response.",
        "ERR_MALFORMED_RESPONSE": "{provider} returned a response that is not valid JSON.",
        "ERR_RESPONSE_NOT_OBJECT": "The AI response is not a JSON object.",
        "ERR_SUMMARY_INVALID": "Missing or invalid summary in the AI response.",
        "ERR_SYMBOL_INVALID": (
            "Invalid symbol #{index} in the AI response: both name and meaning are required."
        ),
        # Placeholders
        "SYMBOL_PLACEHOLDER": "Could not load the detailed interpretation of this symbol.",
        "ADVICE_PLACEHOLDER": "No advice provided.",
        # Connection test
        "TEST_CONNECTION_OK": "Connection to AI provider {provider} works correctly.",
        "TEST_CONNECTION_FAILED": "Could not connect to the AI provider.",
        "TEST_DREAM_DESCRIPTION": "Test dream",
        "TEST_DREAM_EMOTION": "Calm",
        "TEST_DREAM_FILLER": "Test",
        # Prompt vocabulary
        "YES": "Yes",
        "NO": "No",
    },
    LANG_RU: {
        "ERR_NO_ACTIVE_PROVIDER": (
            "Не найден активный AI провайдер для задачи '{task}'. "
            "Проверьте настройки в админ-панели."
        ),
        "ERR_NO_DEFAULT_MODEL": (
            "Провайдер {provider} не имеет модели по умолчанию для задачи '{task}'. "
            "Настройте модель в админ-панели."
        ),
        "ERR_MODEL_NOT_FOUND": (
            "Модель '{model_id}' провайдера {provider} (задача '{task}') не найдена."
        ),
        "ERR_MODEL_PROVIDER_MISMATCH": (
            "Модель {model} относится к типу '{model_type}', "
            "а провайдер {provider} имеет тип '{provider_type}'."
        ),
        "ERR_UNKNOWN_PROVIDER_TYPE": (
            "Неизвестный тип AI провайдера: {provider_type}. Поддерживаются: {supported}"
        ),
        "ERR_BASE_URL_REQUIRED": "Для провайдера {provider} требуется base URL.",
        "ERR_STORE_UNAVAILABLE": "Не удалось загрузить конфигурацию AI провайдера: {detail}",
        "ERR_API_KEY_MISSING": (
            "API ключ не найден для {provider}. Укажите {env_name} в переменных окружения."
        ),
        "ERR_AUTH_REJECTED": (
            "Ошибка аутентификации: проверьте API ключ для {provider} ({env_name})."
        ),
        "ERR_RATE_LIMIT": (
            "{provider}: превышен лимит запросов. Пожалуйста, подождите немного."
        ),
        "ERR_UPSTREAM_UNAVAILABLE": (
            "Сервер {provider} временно недоступен. Попробуйте позже."
        ),
        "ERR_UPSTREAM_TIMEOUT": (
            "{provider} не ответил за {timeout:.0f} секунд. Попробуйте позже."
        ),
        "ERR_IMAGE_PROVIDER_UNSUPPORTED": (
            "{provider} не поддерживает генерацию изображений. "
            "Используйте другой провайдер (Gemini, DALL-E)."
        ),
        "ERR_IMAGE_MODEL_UNSUPPORTED": (
            "Модель {model} ({provider}) не поддерживает генерацию изображений."
        ),
        "ERR_ANALYSIS_FAILED": "Ошибка анализа ({provider}): {detail}",
        "ERR_IMAGE_FAILED": "Ошибка генерации изображения ({provider}): {detail}",
        "ERR_NO_IMAGE_DATA": "Изображение не сгенерировано ({provider}: нет данных в ответе).",
        "ERR_IMAGE_DOWNLOAD_FAILED": "Не удалось загрузить изображение: HTTP {status}",
        "ERR_EMPTY_RESPONSE": "{provider} вернул пустой ответ.",
        "ERR_MALFORMED_RESPONSE": "{provider} вернул ответ, который не является корректным JSON.",
        "ERR_RESPONSE_NOT_OBJECT": "Ответ AI не является JSON-объектом.",
        "ERR_SUMMARY_INVALID": "В ответе AI отсутствует или некорректно поле summary.",
        "ERR_SYMBOL_INVALID": (
            "Некорректный символ #{index} в ответе AI: требуются name и meaning."
        ),
        "SYMBOL_PLACEHOLDER": "Не удалось загрузить подробное толкование символа.",
        "ADVICE_PLACEHOLDER": "Совет отсутствует.",
        "TEST_CONNECTION_OK": "Подключение к AI провайдеру {provider} работает корректно.",
        "TEST_CONNECTION_FAILED": "Не удалось подключиться к AI провайдеру.",
        "TEST_DREAM_DESCRIPTION": "Тестовый сон",
        "TEST_DREAM_EMOTION": "Спокойствие",
        "TEST_DREAM_FILLER": "Тест",
        "YES": "Да",
        "NO": "Нет",
    },
}


def tr(lang: str, key: str, **kwargs: object) -> str:
    """Translate ``key`` into ``lang`` and format it.

    Unknown languages and keys fall back to English, then to the key itself.
    """
    table = STRINGS.get(lang) or STRINGS[LANG_EN]
    template = table.get(key) or STRINGS[LANG_EN].get(key) or key
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        # Missing format values return the raw template instead of failing the caller.
        return template
