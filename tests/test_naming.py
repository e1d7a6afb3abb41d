import pytest

from apigen.errors import NamingError
from apigen.model.naming import (
    child_name,
    split_words,
    to_field_identifier,
    to_snake,
    to_type_identifier,
    to_upper_camel,
)


class TestSplitWords:
    def test_camel_case(self):
        assert split_words("strEnum") == ["str", "Enum"]

    def test_acronym(self):
        assert split_words("HTTPServer") == ["HTTP", "Server"]

    def test_digits_are_words(self):
        assert split_words("v1_float") == ["v", "1", "float"]

    def test_punctuation_is_dropped(self):
        assert split_words('Hello, "World2"!') == ["Hello", "World", "2"]


class TestCaseConversion:
    def test_upper_camel(self):
        assert to_upper_camel("greet_user") == "GreetUser"
        assert to_upper_camel("greetUser") == "GreetUser"
        assert to_upper_camel("Second variant $") == "SecondVariant"

    def test_snake(self):
        assert to_snake("strEnum") == "str_enum"
        assert to_snake("v1_float") == "v_1_float"
        assert to_snake("World") == "world"


class TestIdentifiers:
    def test_leading_digit_is_escaped(self):
        assert to_type_identifier("!123") == "_123"
        assert to_field_identifier("1st") == "_1_st"

    def test_keyword_is_escaped(self):
        assert to_field_identifier("match") == "match_"
        assert to_field_identifier("type") == "type_"
        assert to_type_identifier("self") == "Self_"

    def test_plain_value_is_unchanged(self):
        assert to_type_identifier("FirstVariant") == "FirstVariant"
        assert to_field_identifier("user") == "user"

    def test_no_alphanumeric_content_fails(self):
        with pytest.raises(NamingError):
            to_type_identifier("!!!")


class TestChildName:
    def test_concatenates_parent_and_key(self):
        assert child_name("GreetUser", "strEnum") == "GreetUserStrEnum"
        assert child_name("GreetUserBody", "obj") == "GreetUserBodyObj"

    def test_item_suffix(self):
        assert child_name("Tags", "Item") == "TagsItem"


class TestUnicode:
    def test_accented_letters_are_kept(self):
        assert to_type_identifier("café") == "Café"
        assert to_type_identifier("cafe") == "Cafe"
        assert to_field_identifier("Straße") == "straße"

    def test_similar_words_stay_distinct(self):
        assert to_type_identifier("Größe") == "Größe"
        assert to_type_identifier("Grüße") == "Grüße"

    def test_decomposed_accents_are_composed(self):
        assert to_type_identifier("cafe\u0301") == "Caf\u00e9"

    def test_uncased_letters(self):
        assert to_type_identifier("東京") == "東京"
        assert to_snake("東京 tower") == "東京_tower"
        assert split_words("東京Tower") == ["東京", "Tower"]

    def test_case_changes_outside_ascii(self):
        assert split_words("émileZola") == ["émile", "Zola"]
        assert to_snake("ÉTATCivil") == "état_civil"
