from picol.picol_lexer import Lexer, TokenType, tokenize, unescape

T = TokenType


def kinds(src):
    return [(t.type, t.text) for t in tokenize(src)]


def test_simple_command_ends_with_eol_then_eof():
    assert kinds("set x 5") == [
        (T.ESC, "set"), (T.SEP, " "), (T.ESC, "x"), (T.SEP, " "), (T.ESC, "5"),
        (T.EOL, ""), (T.EOF, ""),
    ]


def test_trailing_newline_is_the_only_eol():
    assert kinds("puts hi\n") == [
        (T.ESC, "puts"), (T.SEP, " "), (T.ESC, "hi"), (T.EOL, "\n"), (T.EOF, ""),
    ]


def test_semicolon_separates_commands():
    assert kinds("a;b") == [
        (T.ESC, "a"), (T.EOL, ";"), (T.ESC, "b"), (T.EOL, ""), (T.EOF, ""),
    ]


def test_eol_consumes_mixed_run():
    toks = tokenize("a ;\n  b")
    assert [t.type for t in toks] == [T.ESC, T.SEP, T.EOL, T.ESC, T.EOL, T.EOF]
    assert toks[2].text == ";\n  "


def test_brace_word_is_literal_and_excludes_outer_braces():
    assert kinds("puts {a b $c [d]}") == [
        (T.ESC, "puts"), (T.SEP, " "), (T.STR, "a b $c [d]"), (T.EOL, ""), (T.EOF, ""),
    ]


def test_nested_braces_balance():
    toks = tokenize("{a {b} c}")
    assert toks[0].type is T.STR
    assert toks[0].text == "a {b} c"


def test_escaped_brace_does_not_close():
    toks = tokenize(r"{a \} b}")
    assert toks[0].text == r"a \} b"


def test_unterminated_brace_runs_to_end():
    toks = tokenize("{abc")
    assert toks[0].type is T.STR
    assert toks[0].text == "abc"


def test_command_substitution_span():
    assert kinds("+ [+ 1 2] 3") == [
        (T.ESC, "+"), (T.SEP, " "), (T.CMD, "+ 1 2"), (T.SEP, " "), (T.ESC, "3"),
        (T.EOL, ""), (T.EOF, ""),
    ]


def test_command_substitution_nesting_and_braces():
    toks = tokenize("[a [b] {]}]")
    assert toks[0].type is T.CMD
    assert toks[0].text == "a [b] {]}"


def test_command_substitution_honours_escape():
    toks = tokenize(r"[a \] b]")
    assert toks[0].text == r"a \] b"


def test_variable_and_word_interpolation_tokens():
    assert kinds("bar$a") == [(T.ESC, "bar"), (T.VAR, "a"), (T.EOL, ""), (T.EOF, "")]


def test_variable_name_stops_at_non_identifier():
    toks = tokenize("$my_var1.x")
    assert (toks[0].type, toks[0].text) == (T.VAR, "my_var1")
    assert (toks[1].type, toks[1].text) == (T.ESC, ".x")


def test_lone_dollar_is_literal_text():
    assert kinds("puts $") == [
        (T.ESC, "puts"), (T.SEP, " "), (T.STR, "$"), (T.EOL, ""), (T.EOF, ""),
    ]


def test_quoted_word_keeps_spaces_and_substitutes():
    assert kinds('puts "a $x b"') == [
        (T.ESC, "puts"), (T.SEP, " "), (T.ESC, "a "), (T.VAR, "x"), (T.ESC, " b"),
        (T.EOL, ""), (T.EOF, ""),
    ]


def test_quoted_word_keeps_semicolon_and_newline():
    toks = tokenize('puts "a;\nb"')
    assert (toks[2].type, toks[2].text) == (T.ESC, "a;\nb")


def test_quote_inside_word_is_plain_text():
    toks = tokenize('a"b')
    assert (toks[0].type, toks[0].text) == (T.ESC, 'a"b')


def test_backslash_pairs_stay_raw_in_span():
    toks = tokenize(r"a\ b c")
    assert (toks[0].type, toks[0].text) == (T.ESC, r"a\ b")
    assert toks[2].text == "c"


def test_comment_at_command_start_produces_no_token():
    assert kinds("# comment\nset x 1") == [
        (T.EOL, "\n"), (T.ESC, "set"), (T.SEP, " "), (T.ESC, "x"), (T.SEP, " "),
        (T.ESC, "1"), (T.EOL, ""), (T.EOF, ""),
    ]


def test_comment_after_semicolon():
    toks = tokenize("set x 1 ;# trailing")
    assert [t.type for t in toks] == [T.ESC, T.SEP, T.ESC, T.SEP, T.ESC, T.SEP, T.EOL, T.EOF]


def test_indented_comment_is_still_a_comment():
    assert [t.type for t in tokenize("  # note\n")] == [T.EOL, T.EOL, T.EOF]


def test_hash_inside_command_is_text():
    toks = tokenize("puts #x")
    assert (toks[2].type, toks[2].text) == (T.ESC, "#x")


def test_empty_input_is_eof_only():
    assert kinds("") == [(T.EOF, "")]


def test_eof_repeats():
    lx = Lexer("x")
    types = [lx.next_token().type for _ in range(4)]
    assert types == [T.ESC, T.EOL, T.EOF, T.EOF]


def test_token_offsets_slice_source():
    src = "set name {val}"
    for tok in tokenize(src):
        assert src[tok.start:tok.end] == tok.text


def test_unescape():
    assert unescape(r"a\tb") == "a\tb"
    assert unescape(r"a\nb") == "a\nb"
    assert unescape(r"\$x\[y\]") == "$x[y]"
    assert unescape(r"\\") == "\\"
    assert unescape("trailing\\") == "trailing\\"
    assert unescape("plain") == "plain"
