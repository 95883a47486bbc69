def test_aspect_ratio_preserved(png_data_url):
    from laudovet.report.images import THUMBNAIL_WIDTH, layout_image

    box = layout_image(png_data_url(400, 200), THUMBNAIL_WIDTH)
    assert box.width == 250
    assert box.height == 125
    assert box.mime_type == "image/png"


def test_letterhead_width(png_data_url):
    from laudovet.report.images import LETTERHEAD_WIDTH, layout_image

    box = layout_image(png_data_url(1200, 300), LETTERHEAD_WIDTH)
    assert (box.width, box.height) == (600, 150)


def test_undecodable_image_falls_back_to_ratio():
    from laudovet.report.images import FALLBACK_RATIO, layout_image

    box = layout_image("data:image/png;base64,bm90IGFuIGltYWdl", 250)
    assert box.width == 250
    assert box.height == 250 * FALLBACK_RATIO


def test_garbage_payload_falls_back():
    from laudovet.report.images import layout_image

    box = layout_image("data:image/jpeg;base64,!!!", 250, caption="Fígado")
    assert box.height == 187.5
    assert box.caption == "Fígado"


def test_bare_base64_is_accepted(png_data_url):
    from laudovet.report.images import layout_image

    bare = png_data_url(100, 100).split(",", 1)[1]
    box = layout_image(bare, 250)
    assert box.height == 250


def test_rows_of_two_in_order():
    from laudovet.report.images import group_rows

    assert group_rows([1, 2, 3, 4, 5]) == [(1, 2), (3, 4), (5,)]
    assert group_rows([]) == []


def test_data_url_round_trip(png_data_url):
    from laudovet.report.images import layout_image

    url = png_data_url(10, 10)
    assert layout_image(url, 250).data_url == url
