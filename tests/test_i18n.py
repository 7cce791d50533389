from unittest.mock import patch

from dreamlens.i18n import LANG_EN, LANG_RU, STRINGS, tr


class TestI18n:
    def test_tr_en(self):
        assert tr(LANG_EN, "YES") == "Yes"

    def test_tr_ru(self):
        assert tr(LANG_RU, "YES") == "Да"

    def test_tr_formatting(self):
        result = tr(LANG_EN, "ERR_NO_ACTIVE_PROVIDER", task="image")
        assert "'image'" in result

    def test_tr_unknown_language_falls_back_to_english(self):
        assert tr("de", "NO") == "No"

    def test_tr_fallback_for_missing_translation(self):
        with patch.dict(STRINGS, {LANG_EN: {"test": "English"}, LANG_RU: {}}):
            assert tr(LANG_RU, "test") == "English"

    def test_tr_missing_key(self):
        assert tr(LANG_EN, "NON_EXISTENT_KEY_123") == "NON_EXISTENT_KEY_123"

    def test_tr_formatting_error(self):
        with patch.dict(STRINGS, {LANG_EN: {"hello": "Hello {name}"}}):
            assert tr(LANG_EN, "hello") == "Hello {name}"

    def test_languages_share_keys(self):
        assert set(STRINGS[LANG_RU]) == set(STRINGS[LANG_EN])
