import unittest

from support import API, APITestCase


class TestVehicles(APITestCase):

    def setUp(self):
        super().setUp()
        self.customer = self.create_customer()

    def test_create_then_read(self):
        created = self.create_vehicle(self.customer['id'], current_mileage=42000)
        response = self.client.get(f"{API}/vehicles/{created['id']}")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['display_name'], '2018 Toyota Camry')
        self.assertEqual(data['customer_id'], self.customer['id'])
        self.assertEqual(data['current_mileage'], 42000)
        self.assertEqual(len(data['mileage_history']), 1)
        self.assertEqual(data['mileage_history'][0]['source'], 'Initial entry')
        self.assertEqual(data['service_history'], [])

    def test_create_for_missing_customer_is_404(self):
        response = self.client.post(f"{API}/vehicles/", json={
            "customer_id": 999, "year": 2018, "make": "Toyota", "model": "Camry",
        })
        self.assertEqual(response.status_code, 404)

    def test_year_is_validated(self):
        response = self.client.post(f"{API}/vehicles/", json={
            "customer_id": self.customer['id'], "year": 1850, "make": "Benz", "model": "Wagen",
        })
        self.assertEqual(response.status_code, 400)

    def test_negative_mileage_is_rejected(self):
        response = self.client.post(f"{API}/vehicles/", json={
            "customer_id": self.customer['id'], "year": 2018, "make": "Toyota", "model": "Camry",
            "current_mileage": -5,
        })
        self.assertEqual(response.status_code, 400)

    def test_mileage_update_is_recorded(self):
        created = self.create_vehicle(self.customer['id'], current_mileage=42000)
        response = self.client.put(f"{API}/vehicles/{created['id']}", json={"current_mileage": 43500})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['current_mileage'], 43500)
        self.assertEqual([e['source'] for e in data['mileage_history']], ['Initial entry', 'Manual update'])

    def test_unchanged_mileage_is_not_recorded_again(self):
        created = self.create_vehicle(self.customer['id'], current_mileage=42000)
        response = self.client.put(f"{API}/vehicles/{created['id']}", json={
            "current_mileage": 42000, "license_plate": "XYZ9876",
        })
        data = response.json()
        self.assertEqual(data['license_plate'], 'XYZ9876')
        self.assertEqual(len(data['mileage_history']), 1)

    def test_add_mileage_reading(self):
        created = self.create_vehicle(self.customer['id'])
        response = self.client.post(f"{API}/vehicles/{created['id']}/mileage", json={
            "mileage": 50100, "source": "Customer reported",
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['current_mileage'], 50100)
        self.assertEqual(data['mileage_history'][-1]['source'], 'Customer reported')

    def test_reassign_to_missing_customer_is_404(self):
        created = self.create_vehicle(self.customer['id'])
        response = self.client.put(f"{API}/vehicles/{created['id']}", json={"customer_id": 999})
        self.assertEqual(response.status_code, 404)

    def test_reassigned_vehicle_takes_its_records_along(self):
        """Work orders and appointments follow a vehicle to its new owner"""
        vehicle = self.create_vehicle(self.customer['id'])
        work_order = self.create_work_order(self.customer['id'], vehicle['id'])
        new_owner = self.create_customer(name="John Smith", phone="555-987-6543", email="john@example.com")

        response = self.client.put(f"{API}/vehicles/{vehicle['id']}", json={"customer_id": new_owner['id']})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['customer_id'], new_owner['id'])

        work_order = self.client.get(f"{API}/work-orders/{work_order['id']}").json()
        self.assertEqual(work_order['customer_id'], new_owner['id'])
        self.assertEqual(work_order['customer']['name'], 'John Smith')

        # The previous owner has nothing left on record
        response = self.client.delete(f"{API}/customers/{self.customer['id']}")
        self.assertEqual(response.status_code, 204)
        work_order = self.client.get(f"{API}/work-orders/{work_order['id']}").json()
        self.assertEqual(work_order['customer_id'], new_owner['id'])

    def test_filter_by_customer(self):
        other = self.create_customer(name="John Smith", phone="555-987-6543", email="john@example.com")
        mine = self.create_vehicle(self.customer['id'])
        self.create_vehicle(other['id'], make="Honda", model="Civic")

        response = self.client.get(f"{API}/vehicles/", params={"customer_id": self.customer['id']})
        self.assertEqual([v['id'] for v in response.json()], [mine['id']])

    def test_service_history(self):
        vehicle = self.create_vehicle(self.customer['id'])
        work_order = self.create_work_order(self.customer['id'], vehicle['id'])

        response = self.client.get(f"{API}/vehicles/{vehicle['id']}")
        self.assertEqual(response.json()['service_history'], [work_order['id']])

        response = self.client.get(f"{API}/vehicles/{vehicle['id']}/service-history")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([w['id'] for w in response.json()], [work_order['id']])

    def test_delete(self):
        created = self.create_vehicle(self.customer['id'])
        response = self.client.delete(f"{API}/vehicles/{created['id']}")
        self.assertEqual(response.status_code, 204)
        response = self.client.get(f"{API}/vehicles/{created['id']}")
        self.assertEqual(response.status_code, 404)

    def test_delete_with_work_orders_is_refused(self):
        vehicle = self.create_vehicle(self.customer['id'])
        self.create_work_order(self.customer['id'], vehicle['id'])
        response = self.client.delete(f"{API}/vehicles/{vehicle['id']}")
        self.assertEqual(response.status_code, 400)


if __name__ == '__main__':
    unittest.main(verbosity=2)
