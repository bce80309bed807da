from messaging_batch.case import (
    camelcase,
    camelcase_keys,
    camelcase_keys_deep,
    pascalcase,
    pascalcase_keys,
    pascalcase_keys_deep,
    snakecase,
    snakecase_keys,
    snakecase_keys_deep,
)


def test_snakecase():
    assert snakecase("myKey") == "my_key"
    assert snakecase("has2fa") == "has_2fa"
    assert snakecase("image1024") == "image_1024"
    assert snakecase("MyKey") == "my_key"
    assert snakecase("my_key") == "my_key"
    assert snakecase("appSecretProof") == "app_secret_proof"


def test_snakecase_keys():
    assert snakecase_keys({"myKey": "value"}) == {"my_key": "value"}
    assert snakecase_keys({"myObj": {"myKey": "value"}}, deep=False) == {
        "my_obj": {"myKey": "value"}
    }
    assert snakecase_keys({"myObj": {"myKey": "value"}}, deep=True) == {
        "my_obj": {"my_key": "value"}
    }


def test_snakecase_keys_deep():
    assert snakecase_keys_deep({"myObj": {"myKey": "value"}}) == {"my_obj": {"my_key": "value"}}
    assert snakecase_keys_deep({"quickReplies": [{"contentType": "text"}]}) == {
        "quick_replies": [{"content_type": "text"}]
    }


def test_camelcase():
    assert camelcase("my_key") == "myKey"
    assert camelcase("has_2fa") == "has2fa"
    assert camelcase("image_1024") == "image1024"
    assert camelcase("myKey") == "myKey"


def test_camelcase_keys():
    assert camelcase_keys({"my_key": "value"}) == {"myKey": "value"}
    assert camelcase_keys({"my_obj": {"my_key": "value"}}) == {"myObj": {"my_key": "value"}}
    assert camelcase_keys_deep({"my_obj": {"my_key": "value"}}) == {"myObj": {"myKey": "value"}}


def test_pascalcase():
    assert pascalcase("my_key") == "MyKey"
    assert pascalcase("myKey") == "MyKey"
    assert pascalcase("has_2fa") == "Has2fa"


def test_pascalcase_keys():
    assert pascalcase_keys({"my_key": "value"}) == {"MyKey": "value"}
    assert pascalcase_keys_deep({"my_obj": {"my_key": "value"}}) == {"MyObj": {"MyKey": "value"}}


def test_non_mapping_values_pass_through():
    assert snakecase_keys_deep("myKey") == "myKey"
    assert snakecase_keys_deep([{"myKey": 1}, 2]) == [{"my_key": 1}, 2]
    assert snakecase_keys({1: "value"}) == {1: "value"}


def test_acronyms_split_before_next_word():
    assert snakecase("HTMLParser") == "html_parser"
    assert snakecase("userID") == "user_id"
    assert camelcase("HTML_parser") == "htmlParser"


def test_leading_and_trailing_underscores_are_kept():
    assert snakecase("__typename") == "__typename"
    assert snakecase("_myKey_") == "_my_key_"
    assert camelcase("_my_key") == "_myKey"
    assert pascalcase("__my_key") == "__MyKey"
    assert snakecase("__") == "__"


def test_non_ascii_letters_are_kept():
    assert snakecase("caféName") == "café_name"
    assert snakecase("éCole") == "é_cole"
    assert camelcase("café_name") == "caféName"


def test_other_separators_split_words():
    assert snakecase("content-type") == "content_type"
    assert camelcase("quick replies") == "quickReplies"
