"""Few-shot question/Cypher pairs for the movie graph."""

from .entities import CypherExample


DEFAULT_EXAMPLES = [
    CypherExample(
        question="How many artists are there?",
        query="MATCH (a:Person)-[:ACTED_IN]->(:Movie) RETURN count(DISTINCT a)",
    ),
    CypherExample(
        question="Which actors played in the movie Casino?",
        query="MATCH (m:Movie {title: 'Casino'})<-[:ACTED_IN]-(a) RETURN a.name",
    ),
    CypherExample(
        question="How many movies has Tom Hanks acted in?",
        query="MATCH (a:Person {name: 'Tom Hanks'})-[:ACTED_IN]->(m:Movie) RETURN count(m)",
    ),
    CypherExample(
        question="List all the genres of the movie Schindler's List",
        query="MATCH (m:Movie {title: 'Schindler\\'s List'})-[:IN_GENRE]->(g:Genre) RETURN g.name",
    ),
    CypherExample(
        question="Which actors have worked in movies from both the comedy and action genres?",
        query="""MATCH (a:Person)-[:ACTED_IN]->(:Movie)-[:IN_GENRE]->(g1:Genre), (a)-[:ACTED_IN]->(:Movie)-[:IN_GENRE]->(g2:Genre)
WHERE g1.name = 'Comedy' AND g2.name = 'Action'
RETURN DISTINCT a.name""",
    ),
    CypherExample(
        question="Which directors have made movies with at least three different actors named 'John'?",
        query="""MATCH (d:Person)-[:DIRECTED]->(m:Movie)<-[:ACTED_IN]-(a:Person)
WHERE a.name STARTS WITH 'John'
WITH d, COUNT(DISTINCT a) AS JohnsCount
WHERE JohnsCount >= 3
RETURN d.name""",
    ),
    CypherExample(
        question="Identify movies where directors also played a role in the film.",
        query="""MATCH (p:Person)-[:DIRECTED]->(m:Movie), (p)-[:ACTED_IN]->(m)
RETURN m.title, p.name""",
    ),
    CypherExample(
        question="Find the actor with the highest number of movies in the database.",
        query="""MATCH (a:Person)-[:ACTED_IN]->(m:Movie)
RETURN a.name, COUNT(m) AS movieCount
ORDER BY movieCount DESC
LIMIT 1""",
    ),
]
