"""Tests for flagsgen.tags - struct tag extraction."""

from flagsgen.tags import extract_default, extract_json_name, unquote_tag


class TestUnquoteTag:
    def test_raw_literal(self) -> None:
        assert unquote_tag('`json:"host" default:"localhost"`') == 'json:"host" default:"localhost"'

    def test_interpreted_literal(self) -> None:
        assert unquote_tag('"json:\\"host\\""') == 'json:"host"'

    def test_interpreted_literal_backslash(self) -> None:
        assert unquote_tag('"default:\\"C:\\\\tmp\\""') == 'default:"C:\\tmp"'

    def test_unquoted_passthrough(self) -> None:
        assert unquote_tag("json") == "json"


class TestExtractJsonName:
    def test_simple(self) -> None:
        assert extract_json_name('json:"host"') == "host"

    def test_options_stripped(self) -> None:
        tag = 'json:"probeAddr,omitempty" yaml:"probeAddr,omitempty"'
        assert extract_json_name(tag) == "probeAddr"

    def test_not_first_key(self) -> None:
        assert extract_json_name('yaml:"y" json:"j"') == "j"

    def test_missing(self) -> None:
        assert extract_json_name('yaml:"host"') == ""

    def test_empty_name_with_options(self) -> None:
        assert extract_json_name('json:",omitempty"') == ""

    def test_dash_means_no_name(self) -> None:
        assert extract_json_name('json:"-"') == ""

    def test_key_must_match_whole_word(self) -> None:
        assert extract_json_name('protojson:"p"') == ""

    def test_empty_tag(self) -> None:
        assert extract_json_name("") == ""


class TestExtractDefault:
    def test_present(self) -> None:
        assert extract_default('json:"port" default:"8080"') == "8080"

    def test_verbatim_with_commas(self) -> None:
        assert extract_default('default:"web,api"') == "web,api"

    def test_empty_value(self) -> None:
        assert extract_default('default:""') == ""

    def test_absent(self) -> None:
        assert extract_default('json:"port"') is None

    def test_other_key_suffix_not_matched(self) -> None:
        assert extract_default('mydefault:"x"') is None
