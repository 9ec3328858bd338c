"""
Seed data script for the School Occurrence Reports system.
Creates sample data for testing and demonstration.
"""
import logging
import random
from datetime import datetime, timedelta

from config import settings, setup_logging
from database import (
    get_db_context, init_db,
    User, SchoolClass, Student, Report, ReporterType, LoginSession,
)
from storage.security import hash_password

logger = logging.getLogger(__name__)

SAMPLE_STUDENTS = {
    "6A": ["Ana Luiza Mendes", "Bruno Costa Santos", "Clara Oliveira Silva", "Daniel Ferreira Gomes"],
    "6B": ["Amanda Oliveira Costa", "Bernardo Santos Lima", "Camila Ferreira Silva"],
    "6C": ["Alexandre Souza Castro", "Beatriz Lima Fernandes", "Carolina Martins Silva"],
    "7A": ["André Santos Silva", "Bianca Lima Oliveira", "Carlos Eduardo Gomes"],
    "7B": ["Antônio Carlos Lima", "Beatriz Santos Oliveira", "Caio Henrique Gomes"],
    "7C": ["Arthur Silva Mendes", "Bruna Costa Oliveira", "Caio Ferreira Santos"],
    "8A": ["Adriele da Silva Santos", "Alice Vitória Silva Oliveira", "Davi Teixeira da Silva"],
    "8B": ["Angelica Maciel Zaqueu Dias", "Arthur dos Santos Clemente", "Gabriela dos Santos Bastos"],
    "9B": ["Ana Karla Avelina dos Anjos", "Daniel Gonçalves Sousa", "Luíza Lopes de Paula"],
}

SAMPLE_CONTENTS = [
    "Ocorrência de comportamento inadequado em sala de aula.",
    "Não realizou a atividade solicitada.",
    "Uso de celular durante a aula.",
]


def seed_database(session_factory=None):
    """Populate database with sample data."""

    with get_db_context(session_factory) as db:
        # Clear existing data
        db.query(LoginSession).delete()
        db.query(Report).delete()
        db.query(Student).delete()
        db.query(SchoolClass).delete()
        db.query(User).delete()

        # Create admin
        admin = User(
            username=settings.admin_username,
            password_hash=hash_password(settings.admin_password),
            is_admin=True,
        )
        db.add(admin)
        db.flush()

        # Create classes
        classes = {name: SchoolClass(name=name) for name in settings.required_classes}
        db.add_all(classes.values())
        db.flush()

        # Assign students to classes
        students = []
        for class_name, names in SAMPLE_STUDENTS.items():
            school_class = classes.get(class_name)
            if not school_class:
                continue
            students.extend(Student(name=name, class_id=school_class.id) for name in names)
        db.add_all(students)
        db.flush()

        # Create random reports for about 20% of the students
        reporter_types = [t.value for t in ReporterType]
        reports = []
        base_date = datetime.now() - timedelta(days=30)

        for _ in range(max(1, len(students) // 5)):
            student = random.choice(students)
            reporter_type = random.choice(reporter_types)
            # Some students get more than one report
            count = 1 + (random.random() < 0.5) + (random.random() < 0.2)
            for content in SAMPLE_CONTENTS[:count]:
                reports.append(Report(
                    student_id=student.id,
                    content=content,
                    reporter_type=reporter_type,
                    created_by=admin.id,
                    date=base_date + timedelta(days=random.randint(1, 29)),
                ))

        db.add_all(reports)
        db.commit()

        logger.info("Database seeded successfully!")
        logger.info("Created:")
        logger.info("  - %d classes", len(classes))
        logger.info("  - %d students", len(students))
        logger.info("  - %d reports", len(reports))
        logger.info("Admin login: %s", admin.username)

    return {"classes": len(classes), "students": len(students), "reports": len(reports)}


if __name__ == "__main__":
    setup_logging(settings.log_level)
    logger.info("Initializing database...")
    init_db()
    logger.info("Seeding database...")
    seed_database()
