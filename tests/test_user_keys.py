from checklist.core.user_keys import UserKeyMapper


def test_empty_name_never_maps() -> None:
    mapper = UserKeyMapper({"": "John", "a": "Ann"})
    assert mapper.map("", ["John"]) is None
    assert mapper.map("   ", ["John"]) is None
    assert mapper.map(None, ["John"]) is None


def test_aliases_checked_in_declaration_order() -> None:
    mapper = UserKeyMapper({"Li": "Lisa", "Lin": "Lina"})
    assert mapper.map("Lina", ["Lisa", "Lina"]) == "Lisa"


def test_catalog_key_substring_longest_first() -> None:
    mapper = UserKeyMapper()
    assert mapper.map("Annabelle", ["Ann", "Anna", "Bob"]) == "Anna"
    assert mapper.map("Bob the builder", ["Ann", "Anna", "Bob"]) == "Bob"


def test_unrecognized_and_case_sensitive() -> None:
    mapper = UserKeyMapper()
    assert mapper.map("Zed", ["John"]) is None
    assert mapper.map("john", ["John"]) is None
