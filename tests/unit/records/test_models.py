import pytest

from records.models import MaterialRecord


class TestMaterialRecord:

    def test_accessors_normalize_text_columns(self):
        record = MaterialRecord.from_row(
            2,
            {"Name_EN": " Olive oil ", "Material_Form": "Liquid", "Order_Unit": " Liter", "Buying_Cost": 7.5},
        )

        assert record.name_en == "Olive oil"
        assert record.name_ar == ""
        assert record.material_form == "liquid"
        assert record.order_unit == "liter"
        assert record.cost_unit == ""
        assert record.buying_cost == 7.5
        assert record.order_limit is None

    def test_display_name_falls_back(self):
        assert MaterialRecord.from_row(0, {"Name_AR": "سكر"}).display_name == "سكر"
        assert MaterialRecord.from_row(4, {}).display_name == "row 5"

    def test_record_is_immutable(self):
        record = MaterialRecord.from_row(0, {"Name_EN": "Salt"})
        with pytest.raises(TypeError):
            record.raw["Name_EN"] = "Pepper"
