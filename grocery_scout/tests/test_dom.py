from grocery_scout.dom import parse_snapshot


def test_parse_strips_scripts_styles_and_comments():
    root = parse_snapshot(
        "<html><body><div>Apples<script>var x = '$9.99';</script>"
        "<style>.a{}</style><!-- $1.00 --></div></body></html>"
    )
    assert root.text() == "Apples"


def test_text_collapses_whitespace():
    root = parse_snapshot("<div>\n  Gala   <b>Apples</b>\n</div>")
    assert root.select_one("div").text() == "Gala Apples"


def test_own_text_ignores_children():
    root = parse_snapshot("<div>$2.99 <span>per lb</span></div>")
    div = root.select_one("div")
    assert div.own_text() == "$2.99"
    assert div.select_one("span").own_text() == "per lb"


def test_sizes_read_from_stamped_attributes():
    root = parse_snapshot('<div data-gs-w="120" data-gs-h="40">x</div><p data-gs-w="auto">y</p>')
    div = root.select_one("div")
    assert div.width == 120.0
    assert div.height == 40.0
    assert not div.has_min_size((100, 50))
    assert div.has_min_size((100, 40))

    p = root.select_one("p")
    assert p.width is None
    assert p.has_min_size((100, 50))


def test_equality_is_element_identity():
    root = parse_snapshot("<ul><li>same</li><li>same</li></ul>")
    a, b = root.select("li")
    assert a != b
    assert a == root.select_one("li")
    assert len({a, b, root.select_one("li")}) == 2


def test_parent_chain_stops_at_document():
    root = parse_snapshot("<html><body><div><span>x</span></div></body></html>")
    span = root.select_one("span")
    assert span.parent().name == "div"
    assert span.parent().parent().name == "body"
    assert root.select_one("html").parent() is None


def test_descendants_in_document_order():
    root = parse_snapshot("<div><p><b>1</b></p><i>2</i></div>")
    names = [n.name for n in root.select_one("div").descendants()]
    assert names == ["p", "b", "i"]
