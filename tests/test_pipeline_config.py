import pytest

from src.app.core.enums import InputCategory, OutputType, ProcessorType
from src.app.core.exceptions import InvalidConfigValueError, InvalidOutputStateError
from src.app.models import InputField, Output, OutputField, PipelineConfig, Processor


@pytest.mark.parametrize(
    "name, required",
    [("PERSONAL.AGE", True), ("COURSE.COURSE_ID", False), ("", False), ("whatever", True)],
)
def test_input_field_make_keeps_arguments(name, required):
    f = InputField.make(name, required)
    assert f.name == name
    assert f.required is required


def test_input_field_category_and_column():
    f = InputField.make("grade.EARNED_POINTS", True)
    assert f.category is InputCategory.GRADE
    assert f.column == "EARNED_POINTS"


@pytest.mark.parametrize("bad_name", ["AGE", "STUDENT.AGE"])
def test_input_field_category_rejects_unknown_prefix(bad_name):
    with pytest.raises(InvalidConfigValueError):
        InputField.make(bad_name, True).category


def test_input_field_is_frozen():
    f = InputField.make("PERSONAL.AGE", True)
    with pytest.raises(AttributeError):
        f.required = False  # type: ignore[misc]


def test_processor_make_kettle():
    p = Processor.make_kettle("Score students", "risk/score.kjb")
    assert p.type is ProcessorType.KETTLE
    assert p.name == "Score students"
    assert p.filename == "risk/score.kjb"


@pytest.mark.parametrize("name, filename", [("", "a.ktr"), ("step", ""), (None, "a.ktr")])
def test_processor_requires_name_and_filename(name, filename):
    with pytest.raises(InvalidConfigValueError):
        Processor.make_kettle(name, filename)


def test_storage_output_scenario():
    out = Output.make_storage("ENROLLMENT_TEMP", "enrollments")
    first = out.add_field_storage("GRADE", "FINAL_GRADE")
    out.add_field_storage("STATUS", "ENROLL_STATUS")

    assert out.type is OutputType.STORAGE
    assert out.from_ == "ENROLLMENT_TEMP"
    assert out.to == "enrollments"
    assert out.filename is None
    assert [(f.source, f.target, f.header) for f in out.fields] == [
        ("GRADE", "FINAL_GRADE", None),
        ("STATUS", "ENROLL_STATUS", None),
    ]
    assert first is out.fields[0]
    assert all(f.type is OutputType.STORAGE for f in out.fields)


def test_csv_output_rejects_storage_field_and_stays_empty():
    out = Output.make_csv("COURSE_TEMP", "courses.csv")
    with pytest.raises(InvalidOutputStateError):
        out.add_field_storage("COURSE_ID", "COURSE_ID")
    assert out.fields == ()


def test_storage_output_rejects_csv_field_and_keeps_fields():
    out = Output.make_storage("RISK_RESULTS", "risk_results")
    out.add_field_storage("ALTERNATIVE_ID", "ALTERNATIVE_ID")
    before = out.fields

    with pytest.raises(InvalidOutputStateError):
        out.add_field_csv("ALTERNATIVE_ID", "STUDENT_ID")

    assert out.fields == before
    assert len(out.fields) == 1


def test_csv_output_fields_keep_call_order():
    out = Output.make_csv("RISK_RESULTS", "risk.csv")
    headers = [f"H{i}" for i in range(7)]
    for i, h in enumerate(headers):
        out.add_field_csv(f"S{i}", h)

    assert out.type is OutputType.CSV
    assert out.filename == "risk.csv"
    assert out.to is None
    assert [f.header for f in out.fields] == headers
    assert all(f.target is None for f in out.fields)


def test_output_fields_view_is_read_only():
    out = Output.make_csv("T", "t.csv")
    out.add_field_csv("A", "a")
    with pytest.raises(AttributeError):
        out.fields.append(OutputField(OutputType.CSV, "B", header="b"))  # type: ignore[attr-defined]
    with pytest.raises(AttributeError):
        out.type = OutputType.STORAGE  # type: ignore[misc]


def test_output_cannot_be_constructed_directly():
    with pytest.raises(TypeError):
        Output(object(), type=OutputType.CSV, from_="T", filename="t.csv")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"type": OutputType.STORAGE, "source": "A"},
        {"type": OutputType.STORAGE, "source": "A", "target": "B", "header": "C"},
        {"type": OutputType.CSV, "source": "A", "target": "B"},
    ],
)
def test_output_field_shape_must_match_type(kwargs):
    with pytest.raises(InvalidOutputStateError):
        OutputField(**kwargs)


def test_output_field_requires_source():
    with pytest.raises(InvalidConfigValueError):
        OutputField(OutputType.CSV, "", header="H")


def test_pipeline_config_make_seals_outputs():
    out = Output.make_storage("RISK_RESULTS", "risk_results")
    out.add_field_storage("ALTERNATIVE_ID", "ALTERNATIVE_ID")

    cfg = PipelineConfig.make(
        type="marist_student_risk",
        name="Marist Student Risk",
        stats={"accuracy": 0.85},
        inputs=[InputField.make("PERSONAL.AGE", True)],
        processors=[Processor.make_kettle("score", "score.kjb")],
        outputs=[out],
    )

    assert cfg.outputs[0].sealed
    with pytest.raises(InvalidOutputStateError):
        out.add_field_storage("COURSE_ID", "COURSE_ID")
    assert len(cfg.outputs[0].fields) == 1

    with pytest.raises(TypeError):
        cfg.stats["accuracy"] = 1.0  # type: ignore[index]


@pytest.mark.parametrize("bad_type", ["", "Marist", "marist-risk", "risk model"])
def test_pipeline_config_type_key_validation(bad_type):
    with pytest.raises(InvalidConfigValueError):
        PipelineConfig.make(type=bad_type, name="x")


def test_pipeline_config_rejects_duplicate_inputs():
    with pytest.raises(InvalidConfigValueError) as e:
        PipelineConfig.make(
            type="p1",
            name="p1",
            inputs=[
                InputField.make("PERSONAL.AGE", True),
                InputField.make("PERSONAL.AGE", False),
            ],
        )
    assert "PERSONAL.AGE" in str(e.value)


def test_pipeline_config_categories_follow_load_order():
    cfg = PipelineConfig.make(
        type="p1",
        name="p1",
        inputs=[
            InputField.make("ACTIVITY.EVENT", False),
            InputField.make("COURSE.COURSE_ID", True),
            InputField.make("PERSONAL.AGE", True),
            InputField.make("COURSE.SUBJECT", False),
        ],
    )
    assert cfg.input_categories() == (
        InputCategory.PERSONAL,
        InputCategory.COURSE,
        InputCategory.ACTIVITY,
    )
    assert cfg.required_columns(InputCategory.COURSE) == frozenset({"COURSE_ID"})
    assert cfg.required_columns(InputCategory.ACTIVITY) == frozenset()


def test_failed_make_leaves_outputs_unsealed():
    out = Output.make_csv("RISK_RESULTS", "risk.csv")

    with pytest.raises(InvalidConfigValueError):
        PipelineConfig.make(type="p1", name="", outputs=[out])

    assert out.sealed is False
    out.add_field_csv("ALTERNATIVE_ID", "STUDENT_ID")
    assert len(out.fields) == 1


def test_failed_make_on_bad_input_leaves_outputs_unsealed():
    out = Output.make_storage("RISK_RESULTS", "risk_results")

    with pytest.raises(InvalidConfigValueError):
        PipelineConfig.make(
            type="p1", name="p1", inputs=[InputField.make("AGE", True)], outputs=[out]
        )

    assert out.sealed is False


def test_input_field_requires_required_flag():
    with pytest.raises(TypeError):
        InputField("PERSONAL.AGE")  # type: ignore[call-arg]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "type": ProcessorType.KETTLE, "filename": "a.ktr"},
        {"name": "step", "type": "nonsense", "filename": "a.ktr"},
        {"name": "step", "type": ProcessorType.KETTLE, "filename": ""},
    ],
)
def test_processor_direct_construction_is_validated(kwargs):
    with pytest.raises(InvalidConfigValueError):
        Processor(**kwargs)


def test_pipeline_config_direct_construction_is_validated():
    with pytest.raises(InvalidConfigValueError):
        PipelineConfig(
            type="BAD KEY",
            name="x",
            description=None,
            stats={},
            inputs=(),
            processors=(),
            outputs=(),
        )

    with pytest.raises(InvalidConfigValueError):
        PipelineConfig(
            type="p1",
            name="p1",
            description=None,
            stats={},
            inputs=(),
            processors=("score.kjb",),
            outputs=(),
        )


def test_pipeline_config_direct_construction_normalises_fields():
    out = Output.make_csv("RISK_RESULTS", "risk.csv")
    cfg = PipelineConfig(
        type="p1",
        name="p1",
        description=None,
        stats={"accuracy": 0.85},
        inputs=[InputField.make("PERSONAL.AGE", True)],
        processors=[],
        outputs=[out],
    )

    assert isinstance(cfg.inputs, tuple)
    assert isinstance(cfg.outputs, tuple)
    assert out.sealed
    with pytest.raises(TypeError):
        cfg.stats["accuracy"] = 1.0  # type: ignore[index]


def test_pipeline_config_declared_columns():
    cfg = PipelineConfig.make(
        type="p1",
        name="p1",
        inputs=[
            InputField.make("COURSE.COURSE_ID", True),
            InputField.make("COURSE.SUBJECT", False),
            InputField.make("PERSONAL.AGE", False),
        ],
    )
    assert cfg.declared_columns(InputCategory.COURSE) == frozenset({"COURSE_ID", "SUBJECT"})
    assert cfg.required_columns(InputCategory.COURSE) == frozenset({"COURSE_ID"})
