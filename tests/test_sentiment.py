from sales_copilot.sentiment import analyze_sentiment


class TestSentiment:
    def test_positive(self):
        result = analyze_sentiment("O produto é bom e a proposta está excelente")

        assert result.sentiment == "positive"
        assert result.confidence == 90
        assert result.emotions == ["positive"]

    def test_negative(self):
        result = analyze_sentiment("Está caro demais")

        assert result.sentiment == "negative"
        assert result.confidence == 70
        assert result.emotions == ["concern"]

    def test_balanced_is_neutral_with_both_tags(self):
        result = analyze_sentiment("Bom, mas caro")

        assert result.sentiment == "neutral"
        assert result.confidence == 50
        assert result.emotions == ["positive", "concern"]

    def test_no_keywords(self):
        result = analyze_sentiment("Vamos marcar para terça")

        assert result.sentiment == "neutral"
        assert result.confidence == 50
        assert result.emotions == []

    def test_repeated_word_counts_once(self):
        assert analyze_sentiment("ótimo ótimo ótimo").confidence == 70

    def test_confidence_capped(self):
        result = analyze_sentiment("Não, é ruim, caro, difícil e um problema")
        assert result.confidence == 90
