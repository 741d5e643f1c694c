import pytest
from pydantic import ValidationError

from src.app.core.enums import InputCategory, OutputType, ProcessorType
from src.app.core.exceptions import InvalidConfigValueError, InvalidOutputStateError
from src.app.schemas.pipelines import PipelineDocument


def _doc(**overrides):
    data = {
        "type": "marist_student_risk",
        "name": "Marist Student Risk",
        "inputs": [
            {"name": "PERSONAL.ALTERNATIVE_ID", "required": True},
            {"name": "COURSE.COURSE_ID", "required": True},
        ],
        "processors": [{"type": "kettle", "name": "score", "file": "score.kjb"}],
        "outputs": [
            {
                "type": "csv",
                "from": "RISK_RESULTS",
                "filename": "risk.csv",
                "fields": [
                    {"source": "ALTERNATIVE_ID", "header": "STUDENT_ID"},
                    {"source": "MODEL_RISK_CONFIDENCE", "header": "RISK"},
                ],
            },
            {
                "type": "STORAGE",
                "from": "RISK_RESULTS",
                "to": "risk_results",
                "fields": [{"source": "ALTERNATIVE_ID", "target": "ALTERNATIVE_ID"}],
            },
        ],
    }
    data.update(overrides)
    return data


def test_document_to_config_builds_typed_model():
    cfg = PipelineDocument.model_validate(_doc(stats={"accuracy": 0.85})).to_config()

    assert cfg.type == "marist_student_risk"
    assert cfg.stats == {"accuracy": 0.85}
    assert [f.name for f in cfg.inputs] == ["PERSONAL.ALTERNATIVE_ID", "COURSE.COURSE_ID"]
    assert cfg.processors[0].type is ProcessorType.KETTLE
    assert cfg.input_categories() == (InputCategory.PERSONAL, InputCategory.COURSE)

    csv_out, storage_out = cfg.outputs
    assert csv_out.type is OutputType.CSV
    assert [f.header for f in csv_out.fields] == ["STUDENT_ID", "RISK"]
    assert storage_out.type is OutputType.STORAGE
    assert storage_out.to == "risk_results"
    assert all(o.sealed for o in cfg.outputs)


@pytest.mark.parametrize("bad_type", ["", "Marist", "bad space", "bad/slash", "risk-model"])
def test_pipeline_type_validation(bad_type):
    with pytest.raises(ValidationError) as e:
        PipelineDocument.model_validate(_doc(type=bad_type))
    assert "type" in str(e.value)


def test_duplicate_inputs_are_rejected():
    with pytest.raises(ValidationError) as e:
        PipelineDocument.model_validate(
            _doc(inputs=[{"name": "PERSONAL.AGE"}, {"name": "PERSONAL.AGE", "required": True}])
        )
    assert "PERSONAL.AGE" in str(e.value)


def test_unknown_keys_are_rejected():
    with pytest.raises(ValidationError):
        PipelineDocument.model_validate(_doc(owner="someone"))


@pytest.mark.parametrize(
    "field",
    [{"source": "A"}, {"source": "A", "target": "B", "header": "C"}],
)
def test_output_field_needs_exactly_one_destination(field):
    outputs = [{"type": "csv", "from": "T", "filename": "t.csv", "fields": [field]}]
    with pytest.raises(ValidationError):
        PipelineDocument.model_validate(_doc(outputs=outputs))


def test_unknown_output_type_is_rejected_by_schema():
    outputs = [{"type": "parquet", "from": "T", "filename": "t.parquet"}]
    with pytest.raises(ValidationError) as e:
        PipelineDocument.model_validate(_doc(outputs=outputs))
    assert "parquet" in str(e.value)
    assert "STORAGE,CSV" in str(e.value)


def test_unknown_processor_type_fails_on_build():
    doc = PipelineDocument.model_validate(
        _doc(processors=[{"type": "python", "name": "x", "file": "x.py"}])
    )
    with pytest.raises(InvalidConfigValueError) as e:
        doc.to_config()
    assert "python" in str(e.value)
    assert "KETTLE" in str(e.value)


def test_header_field_on_storage_output_fails_on_build():
    outputs = [
        {
            "type": "storage",
            "from": "T",
            "to": "t",
            "fields": [{"source": "A", "header": "B"}],
        }
    ]
    doc = PipelineDocument.model_validate(_doc(outputs=outputs))
    with pytest.raises(InvalidOutputStateError):
        doc.to_config()


@pytest.mark.parametrize(
    "output",
    [
        {"type": "storage", "from": "T", "filename": "t.csv"},
        {"type": "storage", "from": "T", "to": "t", "filename": "t.csv"},
        {"type": "csv", "from": "T", "to": "t"},
        {"type": "csv", "from": "T", "to": "t", "filename": "t.csv"},
    ],
)
def test_output_destination_must_match_type(output):
    with pytest.raises(ValidationError) as e:
        PipelineDocument.model_validate(_doc(outputs=[output]))
    assert "'T'" in str(e.value)


def test_uncategorized_input_fails_on_build():
    doc = PipelineDocument.model_validate(_doc(inputs=[{"name": "AGE", "required": True}]))
    with pytest.raises(InvalidConfigValueError):
        doc.to_config()
