from marshmallow import Schema, fields


class OrderItemOutSchema(Schema):
    sweet_id = fields.String(data_key="sweetId")
    name = fields.String()
    quantity = fields.Integer()
    price = fields.Float()


class OrderOutSchema(Schema):
    id = fields.String()
    user_id = fields.String(data_key="userId")
    items = fields.List(fields.Nested(OrderItemOutSchema))
    total_amount = fields.Float(data_key="totalAmount")
    created_at = fields.DateTime(data_key="createdAt")


class SalesOrderOutSchema(OrderOutSchema):
    # admin view carries the buyer's email
    user_email = fields.Method("get_user_email", data_key="userEmail")

    def get_user_email(self, obj):
        user = getattr(obj, "user", None)
        return getattr(user, "email", None)


class SalesSummaryOutSchema(Schema):
    orders = fields.List(fields.Nested(SalesOrderOutSchema))
    total_revenue = fields.Float(data_key="totalRevenue")
    total_orders = fields.Integer(data_key="totalOrders")
