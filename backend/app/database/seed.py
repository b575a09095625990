"""
[seed] app/database/seed.py

Populates the database for local development:
- The "Casă" / "House" property type with its categories, questions and answers
- An admin account and a demo member account (password: String@123)
- A few scored demo evaluations for the member, with Faker property details

Idempotent: existing property types, users and evaluations are left untouched.

Usage:
    python -m app.database.seed
    python -m app.database.seed --update-role <email> <role>
"""

import argparse
import asyncio
import logging
import random

from faker import Faker
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.category.models import QuestionCategory
from app.core.logging import init_logging
from app.core.security import get_password_hash
from app.database.enums import UserRole
from app.database.models import User
from app.database.session import AsyncSessionLocal
from app.evaluation.models import EvaluationSession, UserEvaluationAnswer
from app.evaluation.scoring import AnswerWeights, calculate_evaluation_result, round_half_up
from app.property_type.models import PropertyType
from app.property_type.services import PropertyTypeService
from app.question.models import Answer, Question
from app.team.services import TeamService

logger = logging.getLogger("app.seed")

SEED_PASSWORD = "String@123"
ADMIN_EMAIL = "admin@example.com"
MEMBER_EMAIL = "member@example.com"
NUM_DEMO_EVALUATIONS = 3

# name_ro, name_en, [(text_ro, text_en, weight, [(text_ro, text_en, weight), ...]), ...]
HOUSE_CATALOG = [
    (
        "Utilități",
        "Utilities",
        [
            (
                "Este terenul racordat la apă, canal, curent și gaz?",
                "Is the land connected to water, sewage, electricity and gas?",
                10,
                [
                    ("Da, integral racordat", "Yes, fully connected", 10),
                    ("Parțial racordat (doar la poartă)", "Partially connected (only at gate)", 5),
                    ("Nu este racordat", "Not connected", 0),
                ],
            ),
            (
                "Unde se află utilitățile? Sunt trase în curte sau doar la poartă?",
                "Where are the utilities located? Are they drawn in the yard or only at the gate?",
                8,
                [
                    ("În curte, aproape de casă", "In the yard, close to the house", 10),
                    (
                        "La poartă, cu posibilitate de prelungire",
                        "At the gate, with extension possibility",
                        7,
                    ),
                    ("Nespecificat sau incert", "Unspecified or uncertain", 0),
                ],
            ),
        ],
    ),
    (
        "Fundația",
        "Foundation",
        [
            (
                "Fundația a fost executată pe un pământ bine compactat?",
                "Was the foundation built on well-compacted soil?",
                9,
                [
                    (
                        "Da, pământul a fost compactat corespunzător",
                        "Yes, the soil was properly compacted",
                        10,
                    ),
                    ("Parțial compactat", "Partially compacted", 5),
                    ("Nu a fost compactat corespunzător", "Not properly compacted", 0),
                ],
            ),
            (
                "Au fost folosite materiale de protecție sub prima placă "
                "(pietriș, polistiren, hidroizolație)?",
                "Were protection materials used under the first slab "
                "(gravel, polystyrene, waterproofing)?",
                9,
                [
                    (
                        "Da, toate materialele recomandate au fost folosite",
                        "Yes, all recommended materials were used",
                        10,
                    ),
                    ("Doar unele dintre materiale", "Only some materials", 5),
                    (
                        "Nu, nu au fost folosite materiale de protecție",
                        "No, no protection materials were used",
                        0,
                    ),
                ],
            ),
        ],
    ),
    (
        "Structura",
        "Structure",
        [
            (
                "Ce tip de beton a fost folosit la turnarea elementelor structurale?",
                "What type of concrete was used for casting structural elements?",
                10,
                [
                    (
                        "Beton de înaltă rezistență (ex. C30/C35)",
                        "High-strength concrete (e.g. C30/C35)",
                        10,
                    ),
                    ("Beton standard (ex. C20)", "Standard concrete (e.g. C20)", 7),
                    (
                        "Nu sunt sigure specificațiile betonului",
                        "Concrete specifications are uncertain",
                        0,
                    ),
                ],
            ),
            (
                "Câte bare de fier sunt utilizate în stâlpi și grinzi?",
                "How many steel bars are used in columns and beams?",
                8,
                [
                    (
                        "Respectă normele și recomandările tehnice",
                        "Meets standards and technical recommendations",
                        10,
                    ),
                    ("Numărul de bare este sub recomandat", "Number of bars is below recommended", 5),
                    (
                        "Nu sunt prezente armături corespunzătoare",
                        "No appropriate reinforcement present",
                        0,
                    ),
                ],
            ),
        ],
    ),
    (
        "Ferestre",
        "Windows",
        [
            (
                "Ferestrele sunt echipate cu benzi de etanșeitate pentru eficiență termică?",
                "Are windows equipped with sealing strips for thermal efficiency?",
                8,
                [
                    ("Da, sunt complet etanșe", "Yes, they are completely sealed", 10),
                    (
                        "Parțial, doar unele ferestre au benzi de etanșeitate",
                        "Partially, only some windows have sealing strips",
                        5,
                    ),
                    ("Nu, lipsesc aceste detalii", "No, these details are missing", 0),
                ],
            ),
            (
                "Ce tip de termopan a fost instalat la ferestre?",
                "What type of double glazing was installed on windows?",
                7,
                [
                    (
                        "Termopan cu izolație termică și fonică superioară",
                        "Double glazing with superior thermal and acoustic insulation",
                        10,
                    ),
                    ("Termopan standard", "Standard double glazing", 5),
                    ("Nu sunt instalate geamuri termopan", "No double glazing installed", 0),
                ],
            ),
        ],
    ),
]


class Seeder:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.fake = Faker("ro_RO")

    async def seed_catalog(self) -> PropertyType:
        existing = (
            await self.db.execute(select(PropertyType).filter(PropertyType.name_ro == "Casă"))
        ).scalar_one_or_none()
        if existing:
            logger.info("[SEED] Property type 'Casă' already present, catalog skipped")
            return existing

        house = PropertyType(name_ro="Casă", name_en="House")
        self.db.add(house)
        await self.db.flush()

        for category_ro, category_en, questions in HOUSE_CATALOG:
            category = QuestionCategory(
                name_ro=category_ro, name_en=category_en, property_type_id=house.id
            )
            self.db.add(category)
            await self.db.flush()
            for text_ro, text_en, weight, answers in questions:
                question = Question(
                    text_ro=text_ro, text_en=text_en, weight=weight, category_id=category.id
                )
                self.db.add(question)
                await self.db.flush()
                self.db.add_all(
                    Answer(text_ro=a_ro, text_en=a_en, weight=a_weight, question_id=question.id)
                    for a_ro, a_en, a_weight in answers
                )
        await self.db.commit()
        logger.info(f"[SEED] Created property type 'Casă' with {len(HOUSE_CATALOG)} categories")
        return house

    async def seed_user(self, email: str, name: str, role: UserRole) -> User:
        user = (await self.db.execute(select(User).filter(User.email == email))).scalar_one_or_none()
        if user:
            logger.info(f"[SEED] User {email} already present")
            return user

        user = User(
            email=email,
            name=name,
            hashed_password=get_password_hash(SEED_PASSWORD),
            role=role,
        )
        self.db.add(user)
        await self.db.flush()
        await TeamService(self.db).create_personal_team(user)
        await self.db.commit()
        logger.info(f"[SEED] Created {role.value} user {email}")
        return user

    async def seed_evaluations(self, user: User, property_type_id: int) -> None:
        count = (
            await self.db.execute(
                select(func.count(EvaluationSession.id)).filter(
                    EvaluationSession.user_id == user.id
                )
            )
        ).scalar_one()
        if count:
            logger.info(f"[SEED] {user.email} already has evaluations")
            return

        house = await PropertyTypeService(self.db).get_property_type_or_404(
            property_type_id, depth=3
        )
        for _ in range(NUM_DEMO_EVALUATIONS):
            weights = []
            for category in house.categories:
                for question in category.questions:
                    answer = random.choice(question.answers)
                    weights.append(
                        AnswerWeights(
                            question_id=question.id,
                            answer_id=answer.id,
                            answer_weight=answer.weight,
                            question_weight=question.weight,
                        )
                    )
            result = calculate_evaluation_result(weights, house.categories)
            session = EvaluationSession(
                user_id=user.id,
                property_type_id=house.id,
                property_name=f"Casa {self.fake.last_name()}",
                property_location=f"{self.fake.street_address()}, {self.fake.city()}",
                property_surface=random.randint(60, 320),
                property_floors=random.choice(["P", "P+1", "P+M", "P+1+M"]),
                property_construction_year=random.randint(1970, 2024),
                total_score=round_half_up(result.total_score * 100),
                max_possible_score=round_half_up(result.max_possible_score * 100),
                percentage=round_half_up(result.percentage),
                level=result.level,
                badge=result.badge,
                completion_rate=round_half_up(result.completion_rate),
            )
            self.db.add(session)
            await self.db.flush()
            self.db.add_all(
                UserEvaluationAnswer(
                    evaluation_session_id=session.id,
                    question_id=w.question_id,
                    answer_id=w.answer_id,
                    answer_weight=w.answer_weight,
                    question_weight=w.question_weight,
                    points_earned=round_half_up(w.answer_weight * w.question_weight * 100),
                )
                for w in weights
            )
        await self.db.commit()
        logger.info(f"[SEED] Created {NUM_DEMO_EVALUATIONS} demo evaluations for {user.email}")

    async def run(self) -> None:
        house = await self.seed_catalog()
        await self.seed_user(ADMIN_EMAIL, "Admin User", UserRole.ADMIN)
        member = await self.seed_user(MEMBER_EMAIL, self.fake.name(), UserRole.MEMBER)
        await self.seed_evaluations(member, house.id)


async def update_user_role(email: str, role: UserRole) -> None:
    async with AsyncSessionLocal() as db:
        user = (await db.execute(select(User).filter(User.email == email))).scalar_one_or_none()
        if not user:
            raise SystemExit(f"User with email {email} not found")
        user.role = role
        await db.commit()
        logger.info(f"[SEED] Role of {email} set to {role.value}")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the development database")
    parser.add_argument(
        "--update-role",
        nargs=2,
        metavar=("EMAIL", "ROLE"),
        help="Change the role of an existing user instead of seeding",
    )
    args = parser.parse_args()

    if args.update_role:
        email, role = args.update_role
        await update_user_role(email, UserRole(role.upper()))
        return

    async with AsyncSessionLocal() as db:
        await Seeder(db).run()


if __name__ == "__main__":
    init_logging()
    asyncio.run(main())
