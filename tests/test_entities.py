from wpstatic.entities import NAMED_ENTITIES, decode_entities


def test_named_and_numeric_references():
    text = "It&rsquo;s &amp; &#8220;ok&#8221; &#x27;yes&#x27;"
    assert decode_entities(text) == "It’s & “ok” 'yes'"


def test_unknown_and_malformed_references_are_kept():
    assert decode_entities("&foo; stays") == "&foo; stays"
    assert decode_entities("&#abc; stays") == "&#abc; stays"
    assert decode_entities("&#99999999; stays") == "&#99999999; stays"


def test_single_pass_does_not_double_unescape():
    assert decode_entities("&amp;rsquo;") == "&rsquo;"
    assert decode_entities("&amp;amp;") == "&amp;"


def test_table_round_trip():
    encoded = "".join(f"&{name};" for name in NAMED_ENTITIES)
    assert decode_entities(encoded) == "".join(NAMED_ENTITIES.values())


def test_plain_text_is_untouched():
    decoded = "It’s “fine” — really…"
    assert decode_entities(decoded) == decoded
    assert decode_entities(decode_entities(decoded)) == decoded


def test_empty_input():
    assert decode_entities("") == ""
    assert decode_entities(None) == ""
