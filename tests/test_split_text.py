import pytest

from narration.split_text import pack_words, split_into_sentences


def test_split_into_sentences_keeps_terminators():
    text = "First sentence. Is this the second? Yes!  And a tail"

    assert split_into_sentences(text) == [
        "First sentence.",
        "Is this the second?",
        "Yes!",
        "And a tail",
    ]


def test_split_into_sentences_empty_input():
    assert split_into_sentences("") == []
    assert split_into_sentences("   \n\t ") == []


def test_split_into_sentences_does_not_special_case_abbreviations():
    sentences = split_into_sentences("Mr. Smith paid 3.14 dollars.")

    assert sentences == ["Mr.", "Smith paid 3.", "14 dollars."]


def test_split_into_sentences_drops_blank_segments_between_terminators():
    assert split_into_sentences("Wait... what?!") == ["Wait.", ".", ".", "what?", "!"]


def test_split_into_sentences_trims_newlines():
    text = "Line one.\n\nLine two.\n"

    assert split_into_sentences(text) == ["Line one.", "Line two."]


def test_pack_words_respects_limit():
    groups = pack_words("one two three four five", max_chars=9)

    assert groups == ["one two", "three", "four five"]
    assert all(len(group) <= 9 for group in groups)


def test_pack_words_keeps_oversized_word_whole():
    word = "supercalifragilistic"

    assert pack_words(f"a {word} b", max_chars=5) == ["a", word, "b"]


def test_pack_words_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        pack_words("anything", max_chars=0)
