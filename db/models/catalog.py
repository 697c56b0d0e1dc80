from configs import db


class Category(db.Model):
    __tablename__ = "category"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def __str__(self):
        return self.name


class Product(db.Model):
    __tablename__ = "base_product"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    # nullable: uncategorised products fall into the "General" bucket
    category_id = db.Column(db.Integer, db.ForeignKey("category.id"))
    category = db.relationship("Category", backref="products")

    is_active = db.Column(db.Boolean, default=True)

    def __str__(self):
        return self.name


class ProductSize(db.Model):
    __tablename__ = "product_size"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("base_product.id", ondelete="CASCADE"), nullable=False
    )
    name = db.Column(db.String(100), nullable=False)  # A4, 50x70 ...
    dimensions = db.Column(db.String(100))

    product = db.relationship(
        "Product",
        backref=db.backref(
            "sizes", cascade="all, delete-orphan", lazy="select", passive_deletes=True
        ),
    )

    def __str__(self):
        return f"{self.product.name} - {self.name}" if self.product else self.name


class SizeQuantity(db.Model):
    """Priceable unit: one (product, size, quantity tier) combination."""

    __tablename__ = "size_quantity"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    size_id = db.Column(
        db.Integer, db.ForeignKey("product_size.id", ondelete="CASCADE"), nullable=False
    )
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), default=0)  # list price to customers

    size = db.relationship(
        "ProductSize",
        backref=db.backref(
            "quantities", cascade="all, delete-orphan", lazy="select", passive_deletes=True
        ),
    )

    def __str__(self):
        return f"{self.size} x{self.quantity}" if self.size else str(self.quantity)
