"""
Sample corpus for demos and tests.

Designed so the retrieval strategies disagree in instructive ways:
1. Boolean matching FAILS when one query word is missing from a document
2. BM25 finds PARTIAL matches (keywords only)
3. Vector search finds SEMANTIC matches (meaning only, supplied externally)
4. Hybrid finds the BEST answer (documents with BOTH keywords AND meaning)

It also carries a keyword-stuffed "spam" document (TF saturation demo) and
one short and one long document on the same topic (length normalization demo).
"""

from typing import List

from .models import Document

SAMPLE_DOCUMENTS: List[Document] = [
    # === CONNECTION POOLING DOCS ===
    Document(
        1,
        "Database Connection Pooling Guide",
        "Database connection pooling improves application performance. A pool maintains reusable "
        "connections. Configure pool size based on workload. Monitor connection usage regularly.",
        "tutorial",
    ),
    Document(
        2,
        "PgBouncer Configuration",
        "PgBouncer manages database connection pooling efficiently. Install PgBouncer on your server. "
        "Configure pooling mode: session, transaction, or statement. Set max_client_conn appropriately.",
        "tutorial",
    ),
    Document(
        3,
        "Connection Pool Troubleshooting Guide",
        "Troubleshoot connection pool issues effectively. Common problems include pool exhaustion, "
        "connection leaks, and timeout errors. Monitor active connections. Check for connection leaks "
        "in application code. Increase pool size if needed.",
        "troubleshooting",
    ),
    Document(
        4,
        "Scaling Web Applications",
        "Scale your web application for high traffic. Use load balancers. Implement caching strategies. "
        "Database connections should be managed efficiently to prevent bottlenecks under load.",
        "architecture",
    ),
    # === PERFORMANCE DOCS ===
    Document(
        5,
        "EXPLAIN ANALYZE Quick Tip",
        "Use EXPLAIN ANALYZE to find slow PostgreSQL queries. Shows execution plan and actual timing.",
        "tip",
    ),
    Document(
        6,
        "Complete PostgreSQL Query Tuning Guide",
        "This comprehensive PostgreSQL guide covers query tuning and optimization. PostgreSQL query "
        "performance depends on proper use of EXPLAIN and EXPLAIN ANALYZE. Run EXPLAIN ANALYZE on slow "
        "queries. The EXPLAIN output shows the query planner decisions. PostgreSQL indexing improves "
        "query speed. Use EXPLAIN to verify index usage. ANALYZE updates PostgreSQL statistics. Monitor "
        "PostgreSQL query performance with pg_stat_statements. This PostgreSQL tuning guide helps "
        "optimize database queries.",
        "reference",
    ),
    Document(
        7,
        "Query Performance Optimization",
        "Improve slow database response times through optimization techniques. Proper indexing reduces "
        "query latency significantly. Use EXPLAIN to identify bottlenecks. Query caching helps with "
        "repeated operations. Monitor and tune regularly for best performance.",
        "performance",
    ),
    Document(
        8,
        "Index Optimization Strategies",
        "Optimize database indexes for better query performance. Create indexes on frequently filtered "
        "columns. Use composite indexes for multi-column queries. Remove unused indexes to speed up writes.",
        "performance",
    ),
    # === SECURITY DOCS ===
    Document(
        9,
        "PostgreSQL Authentication Setup",
        "Set up PostgreSQL authentication methods. Configure pg_hba.conf for password, certificate, and "
        "LDAP authentication. Manage user roles and permissions. Enable SSL for encrypted client connections.",
        "security",
    ),
    Document(
        10,
        "Protecting Database Access",
        "Protect your PostgreSQL database from unauthorized access. Implement strong authentication. Use "
        "SSL certificates for encrypted connections. Configure firewall rules. Enable audit logging for "
        "security monitoring.",
        "security",
    ),
    Document(
        11,
        "Database Encryption Guide",
        "Encrypt sensitive data in your database. Use column-level encryption for PII. Implement "
        "transparent data encryption. Manage encryption keys securely. Comply with data protection regulations.",
        "security",
    ),
    # === TF SATURATION DEMO (keyword stuffed) ===
    Document(
        12,
        "SEO Spam: Performance Tips",
        "Performance performance performance. Database performance performance. Improve performance "
        "performance performance. Performance optimization performance tips.",
        "spam",
    ),
    # === GENERAL/REFERENCE DOCS ===
    Document(
        13,
        "Database Fundamentals",
        "Database fundamentals every developer should know. Database design principles. Normalization "
        "techniques. Basic indexing strategies. Introduction to SQL queries.",
        "tutorial",
    ),
    Document(
        14,
        "PostgreSQL Administration Handbook",
        "Comprehensive PostgreSQL administration guide. Covers installation, configuration, backup "
        "strategies, replication setup, monitoring solutions, and maintenance tasks for production deployments.",
        "reference",
    ),
    Document(
        15,
        "PostgreSQL vs MySQL Comparison",
        "Comparing PostgreSQL and MySQL databases. PostgreSQL offers better standards compliance and "
        "advanced features. MySQL has wider hosting support. Both support replication and high availability.",
        "comparison",
    ),
]


def sample_documents() -> List[Document]:
    """A fresh list of the sample documents (ids 1-15)."""
    return list(SAMPLE_DOCUMENTS)
