from vitrine.ingest.brands import build_brands


def test_invalid_primary_color_falls_back_to_gold():
    result = build_brands([{"slug": "chanel", "name": "Chanel", "primaryColor": "bad"}])
    assert result.brands["chanel"].colors["primary"] == "#D4AF37"
    assert any("chanel" in w and "primaryColor" in w for w in result.warnings)


def test_brand_table(brand_records):
    result = build_brands(brand_records)

    assert list(result.brands) == ["chanel", "meriya"]
    chanel = result.brands["chanel"]
    assert chanel.name == "Chanel"
    assert chanel.colors == {"primary": "#D4AF37", "accent": "#112233", "text": "#202124", "bg": "#FFFFFF"}
    assert chanel.whatsapp == "https://wa.me/15551234"
    assert chanel.default_category == "HATS"
    assert chanel.tagline == "Timeless, always"

    meriya = result.brands["meriya"]
    assert meriya.whatsapp is None
    assert meriya.default_category == "BAGS"
    assert meriya.colors["primary"] == "#AABBCC"

    assert len(result.warnings) == 4
    assert any("Duplicate brand slug ignored: chanel" in w for w in result.warnings)
    assert any("meriya" in w and "WhatsApp" in w for w in result.warnings)
    assert any("needs both slug & name" in w for w in result.warnings)


def test_to_dict_omits_missing_whatsapp(brand_records):
    data = build_brands(brand_records).to_dict()
    assert data["chanel"]["whatsapp"] == "https://wa.me/15551234"
    assert "whatsapp" not in data["meriya"]
    assert data["meriya"]["defaultCategory"] == "BAGS"
