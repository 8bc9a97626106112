import pytest
from speech_to_text_client.models import Corpora, Corpus, LanguageModel, StatusClass
from speech_to_text_client.status import (
    CorporaAnalysisCheck,
    CustomizationReadinessCheck,
)


@pytest.mark.parametrize(
    "status, expected",
    [
        ("pending", StatusClass.processing),
        ("training", StatusClass.processing),
        ("ready", StatusClass.done),
        ("available", StatusClass.done),
        ("failed", StatusClass.failed),
        ("upgrading", StatusClass.unexpected),
        ("", StatusClass.unexpected),
        ("READY", StatusClass.unexpected),
    ],
)
def test_customization_readiness(status, expected):
    check = CustomizationReadinessCheck()
    assert check.classify(LanguageModel(customization_id="c", status=status)) is expected


@pytest.mark.parametrize(
    "statuses, expected",
    [
        (["being_processed"], StatusClass.processing),
        (["analyzed", "being_processed"], StatusClass.processing),
        (["analyzed"], StatusClass.done),
        (["undetermined", "analyzed"], StatusClass.done),
        (["undetermined"], StatusClass.unexpected),
        ([], StatusClass.unexpected),
    ],
)
def test_corpora_analysis(statuses, expected):
    corpora = Corpora(corpora=[Corpus(name=f"c{i}", status=s) for i, s in enumerate(statuses)])
    assert CorporaAnalysisCheck().classify(corpora) is expected


def test_unexpected_messages_name_the_status():
    model = LanguageModel(customization_id="c", status="deleted")
    assert (
        CustomizationReadinessCheck().describe_unexpected(model)
        == "Unexpected customization status: deleted"
    )

    corpora = Corpora(corpora=[Corpus(name="a", status="undetermined")])
    assert "undetermined" in CorporaAnalysisCheck().describe_unexpected(corpora)
